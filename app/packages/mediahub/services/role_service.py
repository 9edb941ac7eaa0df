"""角色管理服务：封装角色的增删改查、权限分配与导出逻辑。"""

from __future__ import annotations

import io
from typing import Iterable, Optional

from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
)
from app.packages.mediahub.core.enums import RoleStatusEnum
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.guards import is_builtin_role
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response, pagination_meta
from app.packages.mediahub.core.timezone import format_datetime, now
from app.packages.mediahub.crud.roles import permission_crud, role_crud
from app.packages.mediahub.models.role import Role
from app.packages.mediahub.services.category_service import normalize_slug, require_name
from app.packages.mediahub.services.lookups import load_all

logger = get_logger("roles")


def serialize_permission(permission) -> dict:
    return {
        "id": permission.id,
        "name": permission.name,
        "slug": permission.slug,
        "description": permission.description,
    }


def _active_user_count(role: Role) -> int:
    return sum(1 for user in role.users if not user.is_deleted)


EXPORT_HEADERS = ["角色名称", "角色标识", "显示顺序", "状态", "权限", "用户数", "创建时间"]
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class RoleService:
    """聚合角色管理相关的业务能力。"""

    _STATUS_LABELS = {
        RoleStatusEnum.NORMAL.value: "正常",
        RoleStatusEnum.DISABLED.value: "停用",
    }

    def list_roles(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)
        items, total = role_crud.list_with_filters(
            db,
            search=search,
            statuses=self._normalize_statuses(statuses),
            skip=(page - 1) * limit,
            limit=limit,
        )
        return create_response(
            "获取角色列表成功",
            [self._serialize_role_summary(item) for item in items],
            HTTP_STATUS_OK,
            meta=pagination_meta(total=total, page=page, limit=limit),
        )

    def get_detail(self, db: Session, *, role_id: int) -> dict:
        role = self._get_or_404(db, role_id)
        return create_response("获取角色详情成功", self._serialize_role_detail(role), HTTP_STATUS_OK)

    def create(
        self,
        db: Session,
        *,
        name: str,
        slug: str,
        description: Optional[str] = None,
        sort_order: int = 0,
        status: str = RoleStatusEnum.NORMAL.value,
        permission_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        normalized_slug = normalize_slug(slug)
        normalized_name = require_name(name, message="角色名称不能为空")
        self._assert_unique_slug(db, normalized_slug)
        role = Role(
            name=normalized_name,
            slug=normalized_slug,
            description=(description.strip() if description and description.strip() else None),
            sort_order=max(sort_order, 0),
            status=self._normalize_status(status),
        )
        role.permissions = load_all(db, permission_crud, permission_ids, label="权限")
        role_crud.save(db, role)
        logger.info("Role %s (%s) created", role.id, role.slug)
        return create_response("创建角色成功", self._serialize_role_detail(role), HTTP_STATUS_OK)

    def update(
        self,
        db: Session,
        *,
        role_id: int,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        sort_order: Optional[int] = None,
        status: Optional[str] = None,
        permission_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        role = self._get_or_404(db, role_id)
        if slug is not None:
            normalized_slug = normalize_slug(slug)
            if is_builtin_role(role) and normalized_slug != role.slug:
                raise AppException("系统内置角色不允许修改标识", HTTP_STATUS_FORBIDDEN)
            self._assert_unique_slug(db, normalized_slug, exclude_id=role.id)
            role.slug = normalized_slug
        if name is not None:
            role.name = require_name(name, message="角色名称不能为空")
        if description is not None:
            role.description = description.strip() or None
        if sort_order is not None:
            role.sort_order = max(sort_order, 0)
        if status is not None:
            self._apply_status(role, status)
        if permission_ids is not None:
            role.permissions = load_all(db, permission_crud, permission_ids, label="权限")

        role_crud.save(db, role)
        logger.info("Role %s updated", role.id)
        return create_response("更新角色成功", self._serialize_role_detail(role), HTTP_STATUS_OK)

    def delete(self, db: Session, *, role_id: int) -> dict:
        role = self._get_or_404(db, role_id)
        if is_builtin_role(role):
            raise AppException("系统内置角色不允许删除", HTTP_STATUS_FORBIDDEN)
        if _active_user_count(role):
            raise AppException("存在关联用户，无法删除该角色", HTTP_STATUS_BAD_REQUEST)
        role.permissions = []
        role_crud.soft_delete(db, role)
        logger.info("Role %s deleted", role_id)
        return create_response("删除角色成功", {"role_id": role_id}, HTTP_STATUS_OK)

    def assign_permissions(self, db: Session, *, role_id: int, permission_ids) -> dict:
        """整体替换角色的权限集合。"""
        role = self._get_or_404(db, role_id)
        if not isinstance(permission_ids, (list, tuple)):
            raise AppException("permission_ids 必须是数组", HTTP_STATUS_BAD_REQUEST)
        role.permissions = load_all(db, permission_crud, permission_ids, label="权限")
        role_crud.save(db, role)
        payload = {"role_id": role.id, "permission_ids": sorted(item.id for item in role.permissions)}
        return create_response("分配权限成功", payload, HTTP_STATUS_OK)

    def change_status(self, db: Session, *, role_id: int, status: str) -> dict:
        role = self._get_or_404(db, role_id)
        self._apply_status(role, status)
        role_crud.save(db, role)
        return create_response("更新角色状态成功", self._serialize_role_detail(role), HTTP_STATUS_OK)

    def export(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> StreamingResponse:
        items, _ = role_crud.list_with_filters(
            db,
            search=search,
            statuses=self._normalize_statuses(statuses),
            skip=0,
            limit=10_000,
        )
        return self._xlsx_response(items)

    # ------------------------------------------------------------------
    # 内部辅助方法
    # ------------------------------------------------------------------

    def _xlsx_response(self, roles) -> StreamingResponse:
        """每个角色一行，权限列以逗号拼接权限标识。"""
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "角色列表"
        sheet.append(EXPORT_HEADERS)
        for role in roles:
            permissions = sorted(perm.slug for perm in role.permissions if not perm.is_deleted)
            status_label = self._STATUS_LABELS.get(role.status, role.status)
            sheet.append(
                [role.name, role.slug, role.sort_order, status_label, ", ".join(permissions),
                 _active_user_count(role), format_datetime(role.create_time)]
            )

        stream = io.BytesIO()
        workbook.save(stream)
        stream.seek(0)
        filename = f"roles-{now().strftime('%Y%m%d%H%M%S')}.xlsx"
        return StreamingResponse(
            stream,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _get_or_404(self, db: Session, role_id: int) -> Role:
        role = role_crud.get(db, role_id)
        if role is None:
            raise AppException("角色不存在或已删除", HTTP_STATUS_NOT_FOUND)
        return role

    def _apply_status(self, role: Role, status: str) -> None:
        normalized = self._normalize_status(status)
        if is_builtin_role(role) and normalized == RoleStatusEnum.DISABLED.value:
            raise AppException("系统内置角色不允许停用", HTTP_STATUS_FORBIDDEN)
        role.status = normalized

    def _normalize_statuses(self, statuses: Optional[Iterable[str]]) -> Optional[list[str]]:
        if statuses is None:
            return None
        normalized = [self._normalize_status(status) for status in statuses if status]
        return normalized or None

    def _normalize_status(self, status: str) -> str:
        candidate = (status or "").strip().lower()
        if candidate in self._STATUS_LABELS:
            return candidate
        for code, label in self._STATUS_LABELS.items():
            if candidate == label.lower():
                return code
        raise AppException("未知的角色状态", HTTP_STATUS_BAD_REQUEST)

    def _assert_unique_slug(self, db: Session, slug: str, *, exclude_id: Optional[int] = None) -> None:
        existing = role_crud.get_by_slug(db, slug)
        if existing is not None and existing.id != exclude_id:
            raise AppException("角色标识已存在", HTTP_STATUS_CONFLICT)

    def _serialize_role_summary(self, role: Role) -> dict:
        return {
            "id": role.id,
            "name": role.name,
            "slug": role.slug,
            "description": role.description,
            "sort_order": role.sort_order,
            "status": role.status,
            "status_label": self._STATUS_LABELS.get(role.status, role.status),
            "is_builtin": is_builtin_role(role),
            "user_count": _active_user_count(role),
            "create_time": format_datetime(role.create_time),
        }

    def _serialize_role_detail(self, role: Role) -> dict:
        data = self._serialize_role_summary(role)
        data["permissions"] = [serialize_permission(item) for item in role.permissions if not item.is_deleted]
        data["permission_ids"] = sorted(item.id for item in role.permissions if not item.is_deleted)
        return data


role_service = RoleService()
