"""用户 CRUD：用户名/邮箱查询与列表筛选。"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.user import User


class CRUDUser(CRUDBase[User]):
    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        normalized = (username or "").strip().lower()
        return self.query(db).filter(func.lower(User.username) == normalized).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        normalized = (email or "").strip().lower()
        return self.query(db).filter(func.lower(User.email) == normalized).first()

    def list_with_filters(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[list[User], int]:
        query = self.query(db)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(User.username.ilike(pattern), User.email.ilike(pattern), User.full_name.ilike(pattern))
            )
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        total = query.count()
        items = query.order_by(User.id.asc()).offset(max(skip, 0)).limit(max(limit, 1)).all()
        return items, total

    def list_active_except(self, db: Session, user_id: int) -> list[User]:
        """列出除指定用户外的全部激活用户（共享选择器使用）。"""
        return (
            self.query(db)
            .filter(User.id != user_id, User.is_active.is_(True))
            .order_by(User.username.asc())
            .all()
        )


user_crud = CRUDUser(User)
