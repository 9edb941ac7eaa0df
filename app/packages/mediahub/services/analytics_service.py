"""仪表盘统计服务。

按月统计在 Python 侧分桶，避免依赖具体数据库的日期函数。
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import HTTP_STATUS_OK
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.core.timezone import now as tz_now, start_of_month, to_local
from app.packages.mediahub.crud.categories import category_crud, subcategory_crud
from app.packages.mediahub.crud.files import file_crud
from app.packages.mediahub.crud.folders import folder_crud
from app.packages.mediahub.crud.publications import publication_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.models.category import Category
from app.packages.mediahub.models.publication import Publication
from app.packages.mediahub.models.user import User


def _month_starts(reference: datetime, months: int) -> list[datetime]:
    """以月初时间 ``reference`` 为终点，按时间顺序返回 ``months`` 个月初。"""
    year, month = reference.year, reference.month
    starts: list[datetime] = []
    for _ in range(months):
        starts.append(reference.replace(year=year, month=month))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(starts))


class AnalyticsService:
    def overview(self, db: Session) -> dict:
        totals = publication_crud.query(db).with_entities(
            func.coalesce(func.sum(Publication.views), 0),
            func.coalesce(func.sum(Publication.unique_hits), 0),
        ).one()
        data = {
            "total_users": user_crud.count(db),
            "total_publications": publication_crud.count(db),
            "total_categories": category_crud.count(db),
            "total_subcategories": subcategory_crud.count(db),
            "total_views": int(totals[0] or 0),
            "total_unique_hits": int(totals[1] or 0),
            "total_files": file_crud.count(db),
            "total_folders": folder_crud.count(db),
        }
        return create_response("获取概览成功", data, HTTP_STATUS_OK)

    def publication_stats(self, db: Session) -> dict:
        by_category = (
            publication_crud.query(db)
            .join(Category, Category.id == Publication.category_id)
            .with_entities(Category.id, Category.name, func.count(Publication.id))
            .group_by(Category.id, Category.name)
            .order_by(Category.name.asc())
            .all()
        )
        query = publication_crud.query(db)
        data = {
            "by_status": publication_crud.count_by_status(db),
            "by_category": [
                {"category_id": category_id, "name": name, "count": int(count)}
                for category_id, name, count in by_category
            ],
            "featured": query.filter(Publication.is_featured.is_(True)).count(),
            "leaderboard": query.filter(Publication.is_leaderboard.is_(True)).count(),
        }
        return create_response("获取发布统计成功", data, HTTP_STATUS_OK)

    def monthly_stats(self, db: Session, *, months: int = 12) -> dict:
        starts = _month_starts(start_of_month(), months)
        buckets: dict[str, dict[str, Any]] = {
            start.strftime("%Y-%m"): {"month": start.strftime("%Y-%m"), "publications": 0, "views": 0, "unique_hits": 0}
            for start in starts
        }
        rows = (
            publication_crud.query(db)
            .filter(Publication.create_time >= starts[0])
            .with_entities(Publication.create_time, Publication.views, Publication.unique_hits)
            .all()
        )
        for create_time, views, unique_hits in rows:
            localized = to_local(create_time)
            bucket = buckets.get(localized.strftime("%Y-%m")) if localized else None
            if bucket is None:
                continue
            bucket["publications"] += 1
            bucket["views"] += int(views or 0)
            bucket["unique_hits"] += int(unique_hits or 0)
        return create_response("获取月度统计成功", list(buckets.values()), HTTP_STATUS_OK)

    def top_publications(self, db: Session, *, limit: int = 10) -> dict:
        items = (
            publication_crud.query(db)
            .order_by(Publication.views.desc(), Publication.unique_hits.desc(), Publication.id.asc())
            .limit(max(limit, 1))
            .all()
        )
        data = [
            {
                "id": item.id,
                "title": item.title,
                "slug": item.slug,
                "status": item.status,
                "views": item.views,
                "unique_hits": item.unique_hits,
                "category": item.category.name if item.category else None,
            }
            for item in items
        ]
        return create_response("获取热门内容成功", data, HTTP_STATUS_OK)

    def top_categories(self, db: Session, *, limit: int = 10) -> dict:
        rows = (
            publication_crud.query(db)
            .join(Category, Category.id == Publication.category_id)
            .with_entities(
                Category.id,
                Category.name,
                func.count(Publication.id),
                func.coalesce(func.sum(Publication.views), 0),
            )
            .group_by(Category.id, Category.name)
            .order_by(func.count(Publication.id).desc(), Category.name.asc())
            .limit(max(limit, 1))
            .all()
        )
        data = [
            {"category_id": category_id, "name": name, "publications": int(count), "views": int(views or 0)}
            for category_id, name, count, views in rows
        ]
        return create_response("获取热门分类成功", data, HTTP_STATUS_OK)

    def user_activity(self, db: Session) -> dict:
        current = tz_now()
        month_start = start_of_month(current)
        year_start = month_start.replace(month=1)
        users = user_crud.query(db)
        data = {
            "total_users": users.count(),
            "active_users": users.filter(User.is_active.is_(True)).count(),
            "blocked_users": users.filter(User.is_active.is_(False)).count(),
            "new_this_month": users.filter(User.create_time >= month_start).count(),
            "new_this_year": users.filter(User.create_time >= year_start).count(),
            "logged_in_last_30_days": users.filter(User.last_login_at >= current - timedelta(days=30)).count(),
        }
        return create_response("获取用户活跃度成功", data, HTTP_STATUS_OK)


analytics_service = AnalyticsService()
