"""权限服务：权限点的维护。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import HTTP_STATUS_CONFLICT, HTTP_STATUS_NOT_FOUND, HTTP_STATUS_OK
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.crud.roles import permission_crud
from app.packages.mediahub.models.role import Permission
from app.packages.mediahub.services.category_service import normalize_slug, require_name
from app.packages.mediahub.services.role_service import serialize_permission

logger = get_logger("permissions")


class PermissionService:
    def list_permissions(self, db: Session, *, search: Optional[str] = None) -> dict:
        items = permission_crud.list_all(db, search=search)
        return create_response("获取权限列表成功", [serialize_permission(item) for item in items], HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, permission_id: int) -> dict:
        return create_response(
            "获取权限详情成功", serialize_permission(self._get_or_404(db, permission_id)), HTTP_STATUS_OK
        )

    def create(self, db: Session, *, name: str, slug: str, description: Optional[str] = None) -> dict:
        normalized_slug = normalize_slug(slug)
        self._assert_unique_slug(db, normalized_slug)
        permission = permission_crud.create(
            db,
            {
                "name": require_name(name, message="权限名称不能为空"),
                "slug": normalized_slug,
                "description": description,
            },
        )
        logger.info("Permission %s created", permission.slug)
        return create_response("创建权限成功", serialize_permission(permission), HTTP_STATUS_OK)

    def update(
        self,
        db: Session,
        *,
        permission_id: int,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        description: Optional[str] = None,
    ) -> dict:
        permission = self._get_or_404(db, permission_id)
        if name is not None:
            permission.name = require_name(name, message="权限名称不能为空")
        if slug is not None:
            normalized_slug = normalize_slug(slug)
            self._assert_unique_slug(db, normalized_slug, exclude_id=permission.id)
            permission.slug = normalized_slug
        if description is not None:
            permission.description = description or None
        permission_crud.save(db, permission)
        return create_response("更新权限成功", serialize_permission(permission), HTTP_STATUS_OK)

    def delete(self, db: Session, *, permission_id: int) -> dict:
        """删除前解除与所有角色的关联。"""
        permission = self._get_or_404(db, permission_id)
        permission.roles = []
        permission_crud.soft_delete(db, permission)
        logger.info("Permission %s deleted", permission_id)
        return create_response("删除权限成功", {"id": permission_id}, HTTP_STATUS_OK)

    def _get_or_404(self, db: Session, permission_id: int) -> Permission:
        permission = permission_crud.get(db, permission_id)
        if permission is None:
            raise AppException("权限不存在", HTTP_STATUS_NOT_FOUND)
        return permission

    def _assert_unique_slug(self, db: Session, slug: str, *, exclude_id: Optional[int] = None) -> None:
        existing = permission_crud.get_by_slug(db, slug)
        if existing is not None and existing.id != exclude_id:
            raise AppException("权限标识已存在", HTTP_STATUS_CONFLICT)


permission_service = PermissionService()
