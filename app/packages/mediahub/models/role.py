"""角色与权限模型：角色聚合权限，并通过多对多关系关联用户。"""

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.core.enums import RoleStatusEnum
from app.packages.mediahub.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    active_unique_index,
    role_permissions,
    user_roles,
)


class Role(TimestampMixin, SoftDeleteMixin, Base):
    """角色实体。"""

    __tablename__ = "roles"
    __table_args__ = (active_unique_index("roles", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), index=True)
    slug: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=RoleStatusEnum.NORMAL.value, index=True)

    users: Mapped[List["User"]] = relationship(
        "User",
        secondary=user_roles,
        back_populates="roles",
    )
    permissions: Mapped[List["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin",
    )


class Permission(TimestampMixin, SoftDeleteMixin, Base):
    """权限实体，使用 ``resource:action`` 形式的 slug 标识。"""

    __tablename__ = "permissions"
    __table_args__ = (active_unique_index("permissions", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    roles: Mapped[List[Role]] = relationship(
        Role,
        secondary=role_permissions,
        back_populates="permissions",
    )
