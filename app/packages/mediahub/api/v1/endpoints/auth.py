"""认证相关路由定义。"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.auth import (
    LoginRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)
from app.packages.mediahub.core.dependencies import get_current_active_user, get_db
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.auth_service import auth_service
from app.packages.mediahub.services.user_service import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """注册新用户，默认授予 author 角色并直接返回访问令牌。"""
    return auth_service.register_user(
        db,
        username=payload.username,
        password=payload.password,
        email=payload.email,
        full_name=payload.full_name,
    )


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """校验凭证并签发访问令牌。"""
    return auth_service.login(db, username=payload.username, password=payload.password)


@router.get("/me", response_model=ProfileResponse)
def read_me(current_user: User = Depends(get_current_active_user)) -> ProfileResponse:
    return user_service.build_user_profile(current_user)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ProfileResponse:
    return auth_service.update_profile(
        db,
        user=current_user,
        email=payload.email,
        full_name=payload.full_name,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
