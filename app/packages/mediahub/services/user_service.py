"""用户服务：个人资料聚合、共享候选人以及管理员维护用户。"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
)
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.guards import is_admin_user
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response, pagination_meta
from app.packages.mediahub.core.security import get_password_hash
from app.packages.mediahub.core.timezone import format_datetime
from app.packages.mediahub.crud.roles import role_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.lookups import load_all

logger = get_logger("users")


class UserService:
    """聚合用户相关的核心业务能力。"""

    def serialize_profile(self, user: User) -> dict:
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
            "is_active": user.is_active,
            "roles": user.role_slugs,
            "permissions": user.permission_slugs,
            "is_admin": is_admin_user(user),
            "last_login_at": format_datetime(user.last_login_at),
            "create_time": format_datetime(user.create_time),
        }

    def build_user_profile(self, user: User) -> dict:
        """整理用户的角色与权限，构造统一响应。"""
        return create_response("获取用户信息成功", self.serialize_profile(user), HTTP_STATUS_OK)

    def share_candidates(self, db: Session, *, user: User) -> dict:
        """共享选择器：除当前用户外的全部激活用户。"""
        data = [
            {"id": item.id, "username": item.username, "full_name": item.full_name, "email": item.email}
            for item in user_crud.list_active_except(db, user.id)
        ]
        return create_response("获取可共享用户成功", data, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 管理员维护
    # ------------------------------------------------------------------

    def list_users(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)
        items, total = user_crud.list_with_filters(
            db,
            search=search,
            is_active=is_active,
            skip=(page - 1) * limit,
            limit=limit,
        )
        data = [self.serialize_profile(item) for item in items]
        return create_response(
            "获取用户列表成功", data, HTTP_STATUS_OK, meta=pagination_meta(total=total, page=page, limit=limit)
        )

    def get_detail(self, db: Session, *, user_id: int) -> dict:
        user = self._get_or_404(db, user_id)
        return create_response("获取用户详情成功", self.serialize_profile(user), HTTP_STATUS_OK)

    def create_user(
        self,
        db: Session,
        *,
        username: str,
        password: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        is_active: bool = True,
        role_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        self.assert_unique(db, username=username, email=email)
        roles = load_all(db, role_crud, role_ids, label="角色")
        user = User(
            username=username.strip(),
            email=email.strip().lower() if email else None,
            full_name=full_name.strip() if full_name else None,
            hashed_password=get_password_hash(password),
            is_active=is_active,
        )
        user.roles = roles
        user_crud.save(db, user)
        logger.info("User %s (%s) created", user.id, user.username)
        return create_response("创建用户成功", self.serialize_profile(user), HTTP_STATUS_OK)

    def update_user(
        self,
        db: Session,
        *,
        user_id: int,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
        password: Optional[str] = None,
        is_active: Optional[bool] = None,
        role_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        user = self._get_or_404(db, user_id)
        if email is not None:
            self.assert_unique(db, email=email, exclude_id=user.id)
            user.email = email.strip().lower() or None
        if full_name is not None:
            user.full_name = full_name.strip() or None
        if password:
            user.hashed_password = get_password_hash(password)
        if is_active is not None:
            user.is_active = is_active
        if role_ids is not None:
            user.roles = load_all(db, role_crud, role_ids, label="角色")
        user_crud.save(db, user)
        logger.info("User %s updated", user.id)
        return create_response("更新用户成功", self.serialize_profile(user), HTTP_STATUS_OK)

    def set_active(self, db: Session, *, current_user: User, user_id: int, is_active: bool) -> dict:
        """封禁或解封用户，管理员不能封禁自己。"""
        user = self._get_or_404(db, user_id)
        if user.id == current_user.id and not is_active:
            raise AppException("不能封禁当前登录用户", HTTP_STATUS_BAD_REQUEST)
        user.is_active = is_active
        user_crud.save(db, user)
        logger.info("User %s %s by %s", user.id, "unblocked" if is_active else "blocked", current_user.id)
        msg = "解封用户成功" if is_active else "封禁用户成功"
        return create_response(msg, self.serialize_profile(user), HTTP_STATUS_OK)

    def delete_user(self, db: Session, *, current_user: User, user_id: int) -> dict:
        user = self._get_or_404(db, user_id)
        if user.id == current_user.id:
            raise AppException("不能删除当前登录用户", HTTP_STATUS_BAD_REQUEST)
        user_crud.soft_delete(db, user)
        logger.info("User %s deleted by %s", user_id, current_user.id)
        return create_response("删除用户成功", {"id": user_id}, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 内部辅助方法
    # ------------------------------------------------------------------

    def assert_unique(
        self,
        db: Session,
        *,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_id: Optional[int] = None,
    ) -> None:
        if username is not None:
            existing = user_crud.get_by_username(db, username)
            if existing is not None and existing.id != exclude_id:
                raise AppException("用户名已存在", HTTP_STATUS_CONFLICT)
        if email:
            existing = user_crud.get_by_email(db, email)
            if existing is not None and existing.id != exclude_id:
                raise AppException("邮箱已被使用", HTTP_STATUS_CONFLICT)

    def _get_or_404(self, db: Session, user_id: int) -> User:
        user = user_crud.get(db, user_id)
        if user is None:
            raise AppException("用户不存在", HTTP_STATUS_NOT_FOUND)
        return user


user_service = UserService()
