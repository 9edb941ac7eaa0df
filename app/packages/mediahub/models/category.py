"""分类与子分类模型。"""

from typing import List, Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.models.base import Base, SoftDeleteMixin, TimestampMixin, active_unique_index, category_subcategories


class Category(TimestampMixin, SoftDeleteMixin, Base):
    """内容分类，可控制是否出现在站点菜单以及菜单顺序。"""

    __tablename__ = "categories"
    __table_args__ = (active_unique_index("categories", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(120))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    show_on_menu: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    menu_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    subcategories: Mapped[List["Subcategory"]] = relationship(
        "Subcategory",
        secondary=category_subcategories,
        back_populates="categories",
        lazy="selectin",
    )


class Subcategory(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "subcategories"
    __table_args__ = (active_unique_index("subcategories", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(120))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    categories: Mapped[List[Category]] = relationship(
        Category,
        secondary=category_subcategories,
        back_populates="subcategories",
    )
