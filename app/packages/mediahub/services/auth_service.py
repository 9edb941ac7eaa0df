"""认证服务：封装注册、登录与个人资料维护。"""

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import (
    ACCESS_TOKEN_TYPE,
    AUTHOR_ROLE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_OK,
    HTTP_STATUS_UNAUTHORIZED,
)
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.core.security import create_access_token, get_password_hash, verify_password
from app.packages.mediahub.core.timezone import now as tz_now
from app.packages.mediahub.crud.roles import role_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.user_service import user_service


class AuthService:
    """负责处理用户注册与登录流程，并保持逻辑聚合。"""

    def register_user(
        self,
        db: Session,
        *,
        username: str,
        password: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> dict:
        """创建新用户并授予默认的 author 角色，返回访问令牌。"""
        user_service.assert_unique(db, username=username, email=email)
        user = User(
            username=username.strip(),
            email=email.strip().lower() if email else None,
            full_name=full_name.strip() if full_name else None,
            hashed_password=get_password_hash(password),
            is_active=True,
        )
        default_role = role_crud.get_by_slug(db, AUTHOR_ROLE)
        if default_role is not None:
            user.roles = [default_role]
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info("User registered: %s (%s)", user.username, user.id)
        return create_response("注册成功", self._token_payload(user), HTTP_STATUS_OK)

    def login(self, db: Session, *, username: str, password: str) -> dict:
        """校验用户凭证并签发访问令牌。"""
        user = user_crud.get_by_username(db, username)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Login failed for %s", username)
            raise AppException(msg="用户名或密码错误", code=HTTP_STATUS_UNAUTHORIZED)
        if not user.is_active:
            raise AppException(msg="用户已被禁用", code=HTTP_STATUS_FORBIDDEN)

        user.last_login_at = tz_now()
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("User %s logged in", user.id)
        return create_response("登录成功", self._token_payload(user), HTTP_STATUS_OK)

    def update_profile(
        self,
        db: Session,
        *,
        user: User,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> dict:
        if email is not None:
            user_service.assert_unique(db, email=email, exclude_id=user.id)
            user.email = email.strip().lower() or None
        if full_name is not None:
            user.full_name = full_name.strip() or None
        if new_password:
            if not current_password or not verify_password(current_password, user.hashed_password):
                raise AppException("当前密码不正确", HTTP_STATUS_BAD_REQUEST)
            user.hashed_password = get_password_hash(new_password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return create_response("更新个人资料成功", user_service.serialize_profile(user), HTTP_STATUS_OK)

    def _token_payload(self, user: User) -> dict:
        access_token = create_access_token(user.id, user.username)
        return {
            "access_token": access_token,
            "token_type": ACCESS_TOKEN_TYPE,
            "user": user_service.serialize_profile(user),
        }


auth_service = AuthService()
