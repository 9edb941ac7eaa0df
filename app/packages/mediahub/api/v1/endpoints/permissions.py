"""权限点维护路由，仅管理员可用。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse
from app.packages.mediahub.api.v1.schemas.roles import (
    PermissionCreateRequest,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdateRequest,
)
from app.packages.mediahub.core.dependencies import get_db, require_admin
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.permission_service import permission_service

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=PermissionListResponse)
def list_permissions(
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> PermissionListResponse:
    return permission_service.list_permissions(db, search=search)


@router.get("/{permission_id}", response_model=PermissionResponse)
def get_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> PermissionResponse:
    return permission_service.get_detail(db, permission_id=permission_id)


@router.post("", response_model=PermissionResponse)
def create_permission(
    payload: PermissionCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> PermissionResponse:
    return permission_service.create(db, name=payload.name, slug=payload.slug, description=payload.description)


@router.put("/{permission_id}", response_model=PermissionResponse)
def update_permission(
    permission_id: int,
    payload: PermissionUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> PermissionResponse:
    return permission_service.update(
        db,
        permission_id=permission_id,
        name=payload.name,
        slug=payload.slug,
        description=payload.description,
    )


@router.delete("/{permission_id}", response_model=DictResponse)
def delete_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> DictResponse:
    return permission_service.delete(db, permission_id=permission_id)
