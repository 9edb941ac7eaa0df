"""发布内容 CRUD：后台筛选分页、公开查询与状态统计。"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from app.packages.mediahub.core.enums import PublicationStatusEnum
from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.publication import Publication, PublicationAttachment
from app.packages.mediahub.models.category import Subcategory
from app.packages.mediahub.models.user import User


class CRUDPublication(CRUDBase[Publication]):
    def scoped_query(self, db: Session, *, owner_id: Optional[int] = None) -> Query:
        """``owner_id`` 不为空时仅包含该用户创建或署名的内容。"""
        query = self.query(db)
        if owner_id is not None:
            query = query.filter(
                or_(Publication.creator_id == owner_id, Publication.authors.any(User.id == owner_id))
            )
        return query

    def list_with_filters(
        self,
        db: Session,
        *,
        owner_id: Optional[int] = None,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        author_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[list[Publication], int]:
        query = self.scoped_query(db, owner_id=owner_id)
        if status:
            query = query.filter(Publication.status == status)
        if category_id is not None:
            query = query.filter(Publication.category_id == category_id)
        if subcategory_id is not None:
            query = query.filter(Publication.subcategories.any(Subcategory.id == subcategory_id))
        if author_id is not None:
            query = query.filter(
                or_(Publication.creator_id == author_id, Publication.authors.any(User.id == author_id))
            )
        if date_from is not None:
            query = query.filter(Publication.create_time >= date_from)
        if date_to is not None:
            query = query.filter(Publication.create_time <= date_to)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Publication.title.ilike(pattern), Publication.description.ilike(pattern)))

        total = query.count()
        items = (
            query.order_by(Publication.create_time.desc(), Publication.id.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    def count_by_status(self, db: Session, *, owner_id: Optional[int] = None) -> dict[str, int]:
        query = self.scoped_query(db, owner_id=owner_id).with_entities(
            Publication.status, func.count(Publication.id)
        )
        rows = query.group_by(Publication.status).all()
        counts = {item.value: 0 for item in PublicationStatusEnum}
        for status, count in rows:
            counts[status] = int(count)
        counts["total"] = sum(counts.values())
        return counts

    def published_query(self, db: Session, *, now: datetime) -> Query:
        """已审核通过且发布时间已到（或未设置）的内容。"""
        return self.query(db).filter(
            Publication.status == PublicationStatusEnum.APPROVED.value,
            or_(Publication.publication_date.is_(None), Publication.publication_date <= now),
        )

    def list_published(
        self,
        db: Session,
        *,
        now: datetime,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        leaderboard: Optional[bool] = None,
        order_by_views: bool = False,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[list[Publication], int]:
        query = self.published_query(db, now=now)
        if category_id is not None:
            query = query.filter(Publication.category_id == category_id)
        if subcategory_id is not None:
            query = query.filter(Publication.subcategories.any(Subcategory.id == subcategory_id))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Publication.title.ilike(pattern),
                    Publication.description.ilike(pattern),
                    Publication.meta_description.ilike(pattern),
                )
            )
        if featured is not None:
            query = query.filter(Publication.is_featured.is_(featured))
        if leaderboard is not None:
            query = query.filter(Publication.is_leaderboard.is_(leaderboard))
        total = query.count()
        if order_by_views:
            query = query.order_by(Publication.views.desc(), Publication.unique_hits.desc(), Publication.id.desc())
        else:
            query = query.order_by(
                func.coalesce(Publication.publication_date, Publication.create_time).desc(),
                Publication.id.desc(),
            )
        return query.offset(max(skip, 0)).limit(max(limit, 1)).all(), total

    def count_referencing_category(self, db: Session, category_id: int) -> int:
        return self.query(db).filter(Publication.category_id == category_id).count()

    def delete_attachments_for_file(self, db: Session, file_id: int) -> int:
        return (
            db.query(PublicationAttachment)
            .filter(PublicationAttachment.file_id == file_id)
            .delete(synchronize_session=False)
        )


publication_crud = CRUDPublication(Publication)
