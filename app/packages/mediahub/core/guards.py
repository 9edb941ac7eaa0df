"""统一的管理员与权限判定封装。

集中维护“是否管理员”“是否拥有某权限”“是否资源所有者”的判断，避免在各服务中散落硬编码。
管理员角色隐式拥有全部权限。
"""

from __future__ import annotations

from typing import Optional

from app.packages.mediahub.core.constants import ADMIN_ROLE, BUILTIN_ROLES, HTTP_STATUS_FORBIDDEN
from app.packages.mediahub.core.exceptions import AppException


def is_admin_user(user: object) -> bool:
    return ADMIN_ROLE in (getattr(user, "role_slugs", None) or [])


def has_role(user: object, *slugs: str) -> bool:
    owned = set(getattr(user, "role_slugs", None) or [])
    return any(slug in owned for slug in slugs)


def has_permission(user: object, permission: str) -> bool:
    if is_admin_user(user):
        return True
    return permission in (getattr(user, "permission_slugs", None) or [])


def is_builtin_role(role: object) -> bool:
    return (getattr(role, "slug", None) or "").strip().lower() in BUILTIN_ROLES


def ensure_owner_or_admin(
    user: object,
    owner_id: Optional[int],
    *,
    message: str,
    container_owner_id: Optional[int] = None,
) -> None:
    """既不是资源所有者、也不是所在文件夹的所有者且非管理员时抛出 403。"""
    user_id = getattr(user, "id", None)
    if user_id is not None and user_id in (owner_id, container_owner_id):
        return
    if is_admin_user(user):
        return
    raise AppException(message, HTTP_STATUS_FORBIDDEN)
