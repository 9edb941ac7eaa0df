"""角色管理相关的路由定义。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse
from app.packages.mediahub.api.v1.schemas.roles import (
    RoleCreateRequest,
    RoleDetailResponse,
    RoleListResponse,
    RolePermissionsRequest,
    RoleStatusUpdateRequest,
    RoleUpdateRequest,
)
from app.packages.mediahub.core.constants import PERM_ROLES_MANAGE
from app.packages.mediahub.core.dependencies import get_db, require_permission
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.role_service import role_service

router = APIRouter(prefix="/roles", tags=["roles"])

manage_roles = require_permission(PERM_ROLES_MANAGE)


@router.get("", response_model=RoleListResponse)
def list_roles(
    search: Optional[str] = Query(None, description="角色名称或标识模糊匹配"),
    statuses: Optional[list[str]] = Query(None, description="角色状态，可多选"),
    page: int = Query(1, ge=1, description="页码，从 1 开始"),
    limit: int = Query(20, ge=1, le=100, description="每页数量"),
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> RoleListResponse:
    return role_service.list_roles(db, search=search, statuses=statuses, page=page, limit=limit)


@router.get("/export")
def export_roles(
    search: Optional[str] = Query(None),
    statuses: Optional[list[str]] = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> StreamingResponse:
    return role_service.export(db, search=search, statuses=statuses)


@router.get("/{role_id}", response_model=RoleDetailResponse)
def get_role_detail(role_id: int, db: Session = Depends(get_db), _: User = Depends(manage_roles)) -> RoleDetailResponse:
    return role_service.get_detail(db, role_id=role_id)


@router.post("", response_model=RoleDetailResponse)
def create_role(
    payload: RoleCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> RoleDetailResponse:
    return role_service.create(
        db,
        name=payload.name,
        slug=payload.slug,
        description=payload.description,
        sort_order=payload.sort_order,
        status=payload.status,
        permission_ids=payload.permission_ids,
    )


@router.put("/{role_id}", response_model=RoleDetailResponse)
def update_role(
    role_id: int,
    payload: RoleUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> RoleDetailResponse:
    return role_service.update(
        db,
        role_id=role_id,
        name=payload.name,
        slug=payload.slug,
        description=payload.description,
        sort_order=payload.sort_order,
        status=payload.status,
        permission_ids=payload.permission_ids,
    )


@router.post("/{role_id}/permissions", response_model=DictResponse)
def assign_permissions(
    role_id: int,
    payload: RolePermissionsRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> DictResponse:
    return role_service.assign_permissions(db, role_id=role_id, permission_ids=payload.permission_ids)


@router.put("/{role_id}/status", response_model=RoleDetailResponse)
def change_role_status(
    role_id: int,
    payload: RoleStatusUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_roles),
) -> RoleDetailResponse:
    return role_service.change_status(db, role_id=role_id, status=payload.status)


@router.delete("/{role_id}", response_model=DictResponse)
def delete_role(role_id: int, db: Session = Depends(get_db), _: User = Depends(manage_roles)) -> DictResponse:
    return role_service.delete(db, role_id=role_id)
