"""公开站点路由：无需登录即可访问的发布内容与导航链接。"""

import hashlib
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse, ListResponse
from app.packages.mediahub.api.v1.schemas.nav_links import NavLinkListResponse
from app.packages.mediahub.core.dependencies import get_db, get_optional_user
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.nav_link_service import nav_link_service
from app.packages.mediahub.services.publication_service import publication_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/publications", response_model=ListResponse)
def list_published(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    category_slug: Optional[str] = Query(None, alias="category"),
    subcategory_id: Optional[int] = Query(None, alias="subcategoryId"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> ListResponse:
    return publication_service.list_public(
        db,
        category_id=category_id,
        category_slug=category_slug,
        subcategory_id=subcategory_id,
        page=page,
        limit=limit,
    )


@router.get("/publications/featured", response_model=ListResponse)
def list_featured(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)) -> ListResponse:
    return publication_service.featured(db, limit=limit)


@router.get("/publications/leaderboard", response_model=ListResponse)
def list_leaderboard(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)) -> ListResponse:
    return publication_service.leaderboard(db, limit=limit)


@router.get("/publications/search", response_model=ListResponse)
def search_published(
    q: str = Query(..., description="标题/描述关键字"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> ListResponse:
    return publication_service.search_public(db, query=q, page=page, limit=limit)


@router.get("/publications/{slug}", response_model=DictResponse)
def view_publication(
    slug: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> DictResponse:
    """访问详情会累加浏览量，独立访问按登录用户或客户端指纹去重。"""
    return publication_service.view_by_slug(db, slug=slug, client_key=_client_key(request, current_user))


@router.get("/nav-links", response_model=NavLinkListResponse)
def list_nav_links(db: Session = Depends(get_db)) -> NavLinkListResponse:
    return nav_link_service.list_links(db, active_only=True)


def _client_key(request: Request, user: Optional[User]) -> str:
    if user is not None:
        return f"user-{user.id}"
    forwarded = request.headers.get("x-forwarded-for", "")
    ip_address = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else "")
    fingerprint = f"{ip_address}|{request.headers.get('user-agent', '')}"
    return hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()
