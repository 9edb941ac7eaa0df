"""用户模型：记录登录凭证、资料与角色关系。"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.models.base import Base, SoftDeleteMixin, TimestampMixin, active_unique_index, user_roles


class User(TimestampMixin, SoftDeleteMixin, Base):
    """系统用户实体，通过多对多关系持有角色。"""

    __tablename__ = "users"
    __table_args__ = (
        active_unique_index("users", "username"),
        active_unique_index("users", "email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=user_roles,
        back_populates="users",
        lazy="selectin",
    )

    @property
    def role_slugs(self) -> list[str]:
        return sorted({role.slug for role in self.roles if not role.is_deleted})

    @property
    def permission_slugs(self) -> list[str]:
        slugs: set[str] = set()
        for role in self.roles:
            if role.is_deleted or role.status != "normal":
                continue
            slugs.update(perm.slug for perm in role.permissions if not perm.is_deleted)
        return sorted(slugs)
