"""导航链接 CRUD。"""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.nav_link import NavLink


class CRUDNavLink(CRUDBase[NavLink]):
    def list_ordered(self, db: Session, *, active_only: bool = False) -> list[NavLink]:
        query = self.query(db)
        if active_only:
            query = query.filter(NavLink.is_active.is_(True))
        return query.order_by(NavLink.display_order.asc(), NavLink.id.asc()).all()


nav_link_crud = CRUDNavLink(NavLink)
