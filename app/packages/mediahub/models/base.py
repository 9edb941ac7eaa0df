"""模型基类：统一声明式基类、审计字段与多对多关联表。

本模块集中提供：
- Base：SQLAlchemy 声明式基类，带统一命名约定；
- TimestampMixin：`create_time`、`update_time`；
- SoftDeleteMixin：`is_deleted`；
- 多对多关联表：用户-角色、角色-权限、分类-子分类、发布内容-子分类、发布内容-作者。
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, MetaData, Table, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression

from app.packages.mediahub.core.timezone import now as tz_now

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """全局声明式基类，附带一致的命名约定，便于迁移与调试。"""

    metadata = metadata_obj


class TimestampMixin:
    """通用时间戳字段，为记录新增、更新提供审计能力。"""

    create_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=tz_now,
        server_default=func.now(),
        nullable=False,
    )
    update_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=tz_now,
        server_default=func.now(),
        onupdate=tz_now,
        nullable=False,
    )


class SoftDeleteMixin:
    """软删除字段，避免物理删除导致数据丢失。"""

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        server_default=expression.false(),
        default=False,
        nullable=False,
    )


def active_unique_index(table: str, column: str) -> Index:
    """未软删除的行内 ``column`` 唯一；已删除行的取值可以再次使用。"""
    return Index(
        f"uq_{table}_{column}_active",
        column,
        unique=True,
        sqlite_where=text("is_deleted = 0"),
        postgresql_where=text("is_deleted = false"),
    )


def _association(name: str, left: tuple[str, str], right: tuple[str, str]) -> Table:
    """构造带创建时间的多对多关联表，两端外键级联删除。"""
    return Table(
        name,
        Base.metadata,
        Column(left[0], Integer, ForeignKey(left[1], ondelete="CASCADE"), primary_key=True, index=True),
        Column(right[0], Integer, ForeignKey(right[1], ondelete="CASCADE"), primary_key=True, index=True),
        Column("create_time", DateTime(timezone=True), server_default=func.now(), nullable=False),
    )


user_roles = _association("user_roles", ("user_id", "users.id"), ("role_id", "roles.id"))
role_permissions = _association("role_permissions", ("role_id", "roles.id"), ("permission_id", "permissions.id"))
category_subcategories = _association(
    "category_subcategories",
    ("category_id", "categories.id"),
    ("subcategory_id", "subcategories.id"),
)
publication_subcategories = _association(
    "publication_subcategories",
    ("publication_id", "publications.id"),
    ("subcategory_id", "subcategories.id"),
)
publication_authors = _association(
    "publication_authors",
    ("publication_id", "publications.id"),
    ("user_id", "users.id"),
)
