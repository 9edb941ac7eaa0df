"""发布内容后台路由：作者与管理员维护内容，审核需要审核权限。"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse, ListResponse
from app.packages.mediahub.api.v1.schemas.publications import (
    ApproveRequest,
    PublicationCreateRequest,
    PublicationUpdateRequest,
    RejectRequest,
)
from app.packages.mediahub.core.constants import ADMIN_ROLE, AUTHOR_ROLE, PERM_POSTS_APPROVE
from app.packages.mediahub.core.dependencies import get_db, require_any_role, require_permission
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.publication_service import publication_service

router = APIRouter(prefix="/publications", tags=["publications"])

editor_required = require_any_role(ADMIN_ROLE, AUTHOR_ROLE)
reviewer_required = require_permission(PERM_POSTS_APPROVE)


@router.get("", response_model=ListResponse)
def list_publications(
    status: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    subcategory_id: Optional[int] = Query(None, alias="subcategoryId"),
    author_id: Optional[int] = Query(None, alias="authorId"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> ListResponse:
    return publication_service.list_publications(
        db,
        user=current_user,
        status=status,
        category_id=category_id,
        subcategory_id=subcategory_id,
        author_id=author_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/counts", response_model=DictResponse)
def counts_by_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> DictResponse:
    return publication_service.counts_by_status(db, user=current_user)


@router.get("/{publication_id}", response_model=DictResponse)
def get_publication(
    publication_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> DictResponse:
    return publication_service.get_detail(db, user=current_user, publication_id=publication_id)


@router.post("", response_model=DictResponse)
def create_publication(
    payload: PublicationCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> DictResponse:
    return publication_service.create(db, user=current_user, payload=payload.model_dump())


@router.put("/{publication_id}", response_model=DictResponse)
def update_publication(
    publication_id: int,
    payload: PublicationUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> DictResponse:
    return publication_service.update(
        db,
        user=current_user,
        publication_id=publication_id,
        changes=payload.model_dump(exclude_unset=True),
    )


@router.delete("/{publication_id}", response_model=DictResponse)
def delete_publication(
    publication_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(editor_required),
) -> DictResponse:
    return publication_service.delete(db, user=current_user, publication_id=publication_id)


@router.post("/{publication_id}/approve", response_model=DictResponse)
def approve_publication(
    publication_id: int,
    payload: Optional[ApproveRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(reviewer_required),
) -> DictResponse:
    return publication_service.approve(
        db,
        user=current_user,
        publication_id=publication_id,
        publication_date=payload.publication_date if payload else None,
    )


@router.post("/{publication_id}/reject", response_model=DictResponse)
def reject_publication(
    publication_id: int,
    payload: RejectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(reviewer_required),
) -> DictResponse:
    return publication_service.reject(db, user=current_user, publication_id=publication_id, reason=payload.reason)
