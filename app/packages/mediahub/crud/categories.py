"""分类与子分类 CRUD。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.category import Category, Subcategory


class CRUDCategory(CRUDBase[Category]):
    def list_ordered(self, db: Session, *, show_on_menu: Optional[bool] = None) -> list[Category]:
        query = self.query(db)
        if show_on_menu is not None:
            query = query.filter(Category.show_on_menu.is_(show_on_menu))
        return query.order_by(Category.menu_order.asc(), Category.name.asc()).all()


class CRUDSubcategory(CRUDBase[Subcategory]):
    def list_ordered(self, db: Session, *, category_id: Optional[int] = None) -> list[Subcategory]:
        query = self.query(db)
        if category_id is not None:
            query = query.filter(Subcategory.categories.any(Category.id == category_id))
        return query.order_by(Subcategory.name.asc()).all()


category_crud = CRUDCategory(Category)
subcategory_crud = CRUDSubcategory(Subcategory)
