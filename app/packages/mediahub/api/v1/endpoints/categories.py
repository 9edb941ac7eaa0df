"""分类与子分类路由：查询公开，维护需要分类管理权限。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.categories import (
    CategoryCreateRequest,
    CategoryUpdateRequest,
    SubcategoryCreateRequest,
    SubcategoryUpdateRequest,
)
from app.packages.mediahub.api.v1.schemas.common import DictResponse, ListResponse
from app.packages.mediahub.core.constants import PERM_CATEGORIES_MANAGE
from app.packages.mediahub.core.dependencies import get_db, require_permission
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.category_service import category_service
from app.packages.mediahub.services.subcategory_service import subcategory_service

router = APIRouter(prefix="/categories", tags=["categories"])
subcategory_router = APIRouter(prefix="/subcategories", tags=["subcategories"])

manage_categories = require_permission(PERM_CATEGORIES_MANAGE)


@router.get("", response_model=ListResponse)
def list_categories(
    show_on_menu: Optional[bool] = Query(None, alias="showOnMenu"),
    db: Session = Depends(get_db),
) -> ListResponse:
    return category_service.list_categories(db, show_on_menu=show_on_menu)


@router.get("/slug/{slug}", response_model=DictResponse)
def get_category_by_slug(slug: str, db: Session = Depends(get_db)) -> DictResponse:
    return category_service.get_by_slug(db, slug=slug)


@router.get("/{category_id}", response_model=DictResponse)
def get_category(category_id: int, db: Session = Depends(get_db)) -> DictResponse:
    return category_service.get_detail(db, category_id=category_id)


@router.post("", response_model=DictResponse)
def create_category(
    payload: CategoryCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return category_service.create(db, **payload.model_dump())


@router.put("/{category_id}", response_model=DictResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return category_service.update(db, category_id=category_id, changes=payload.model_dump(exclude_unset=True))


@router.delete("/{category_id}", response_model=DictResponse)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return category_service.delete(db, category_id=category_id)


@subcategory_router.get("", response_model=ListResponse)
def list_subcategories(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),
) -> ListResponse:
    return subcategory_service.list_subcategories(db, category_id=category_id)


@subcategory_router.get("/{subcategory_id}", response_model=DictResponse)
def get_subcategory(subcategory_id: int, db: Session = Depends(get_db)) -> DictResponse:
    return subcategory_service.get_detail(db, subcategory_id=subcategory_id)


@subcategory_router.post("", response_model=DictResponse)
def create_subcategory(
    payload: SubcategoryCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return subcategory_service.create(db, **payload.model_dump())


@subcategory_router.put("/{subcategory_id}", response_model=DictResponse)
def update_subcategory(
    subcategory_id: int,
    payload: SubcategoryUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return subcategory_service.update(
        db, subcategory_id=subcategory_id, changes=payload.model_dump(exclude_unset=True)
    )


@subcategory_router.delete("/{subcategory_id}", response_model=DictResponse)
def delete_subcategory(
    subcategory_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(manage_categories),
) -> DictResponse:
    return subcategory_service.delete(db, subcategory_id=subcategory_id)
