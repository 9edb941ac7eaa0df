"""导航链接维护路由。"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse
from app.packages.mediahub.api.v1.schemas.nav_links import (
    NavLinkCreateRequest,
    NavLinkListResponse,
    NavLinkResponse,
    NavLinkUpdateRequest,
)
from app.packages.mediahub.core.constants import PERM_NAV_LINKS_MANAGE
from app.packages.mediahub.core.dependencies import get_db, require_permission
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.nav_link_service import nav_link_service

router = APIRouter(prefix="/nav-links", tags=["nav-links"])

manage_links = require_permission(PERM_NAV_LINKS_MANAGE)


@router.get("", response_model=NavLinkListResponse)
def list_links(db: Session = Depends(get_db), _: User = Depends(manage_links)) -> NavLinkListResponse:
    return nav_link_service.list_links(db)


@router.get("/{link_id}", response_model=NavLinkResponse)
def get_link(link_id: int, db: Session = Depends(get_db), _: User = Depends(manage_links)) -> NavLinkResponse:
    return nav_link_service.get_detail(db, link_id=link_id)


@router.post("", response_model=NavLinkResponse)
def create_link(
    payload: NavLinkCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_links),
) -> NavLinkResponse:
    return nav_link_service.create(db, **payload.model_dump())


@router.put("/{link_id}", response_model=NavLinkResponse)
def update_link(
    link_id: int,
    payload: NavLinkUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_links),
) -> NavLinkResponse:
    return nav_link_service.update(db, link_id=link_id, changes=payload.model_dump(exclude_unset=True))


@router.delete("/{link_id}", response_model=DictResponse)
def delete_link(link_id: int, db: Session = Depends(get_db), _: User = Depends(manage_links)) -> DictResponse:
    return nav_link_service.delete(db, link_id=link_id)
