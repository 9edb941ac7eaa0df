"""用户相关路由：共享候选人与管理员维护。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse
from app.packages.mediahub.api.v1.schemas.users import (
    ShareCandidatesResponse,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from app.packages.mediahub.core.constants import PERM_USERS_MANAGE
from app.packages.mediahub.core.dependencies import get_current_active_user, get_db, require_permission
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"])

manage_users = require_permission(PERM_USERS_MANAGE)


@router.get("/share-candidates", response_model=ShareCandidatesResponse)
def share_candidates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ShareCandidatesResponse:
    """共享选择器使用：除自己以外的全部激活用户。"""
    return user_service.share_candidates(db, user=current_user)


@router.get("", response_model=UserListResponse)
def list_users(
    search: Optional[str] = Query(None, description="用户名/邮箱/姓名模糊匹配"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(manage_users),
) -> UserListResponse:
    return user_service.list_users(db, search=search, is_active=is_active, page=page, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), _: User = Depends(manage_users)) -> UserResponse:
    return user_service.get_detail(db, user_id=user_id)


@router.post("", response_model=UserResponse)
def create_user(
    payload: UserCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_users),
) -> UserResponse:
    return user_service.create_user(
        db,
        username=payload.username,
        password=payload.password,
        email=payload.email,
        full_name=payload.full_name,
        is_active=payload.is_active,
        role_ids=payload.role_ids,
    )


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(manage_users),
) -> UserResponse:
    return user_service.update_user(
        db,
        user_id=user_id,
        email=payload.email,
        full_name=payload.full_name,
        password=payload.password,
        is_active=payload.is_active,
        role_ids=payload.role_ids,
    )


@router.post("/{user_id}/block", response_model=UserResponse)
def block_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
) -> UserResponse:
    return user_service.set_active(db, current_user=current_user, user_id=user_id, is_active=False)


@router.post("/{user_id}/unblock", response_model=UserResponse)
def unblock_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
) -> UserResponse:
    return user_service.set_active(db, current_user=current_user, user_id=user_id, is_active=True)


@router.delete("/{user_id}", response_model=DictResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(manage_users),
) -> DictResponse:
    return user_service.delete_user(db, current_user=current_user, user_id=user_id)
