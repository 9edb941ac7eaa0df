"""角色与权限 CRUD。"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.role import Permission, Role


class CRUDRole(CRUDBase[Role]):
    """提供角色实体的便捷查询方法。"""

    def list_with_filters(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[list[Role], int]:
        """综合查询角色列表并返回总数。"""
        query = self.query(db)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Role.name.ilike(pattern), Role.slug.ilike(pattern)))
        if statuses:
            normalized = {status.strip().lower() for status in statuses if status}
            if normalized:
                query = query.filter(Role.status.in_(normalized))

        total = query.count()
        items = (
            query.order_by(Role.sort_order.asc(), Role.id.asc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total


class CRUDPermission(CRUDBase[Permission]):
    def list_all(self, db: Session, *, search: Optional[str] = None) -> list[Permission]:
        query = self.query(db)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Permission.name.ilike(pattern), Permission.slug.ilike(pattern)))
        return query.order_by(Permission.slug.asc()).all()


role_crud = CRUDRole(Role)
permission_crud = CRUDPermission(Permission)
