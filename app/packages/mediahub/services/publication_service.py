"""发布内容服务：后台维护、审核流转与公开访问。

状态流转规则：

* ``draft -> pending``：提交审核
* ``pending -> approved | rejected``：审核
* ``rejected -> pending``：修改后重新提交
* ``approved -> rejected``：撤回已发布内容

其余流转一律返回 400。非管理员编辑已通过或已拒绝的内容时，内容自动回到 ``pending``。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.cache import get_cache
from app.packages.mediahub.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
    MAX_PAGE_LIMIT,
    PERM_POSTS_APPROVE,
)
from app.packages.mediahub.core.enums import PUBLICATION_TRANSITIONS, PublicationStatusEnum
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.guards import ensure_owner_or_admin, has_permission
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response, pagination_meta
from app.packages.mediahub.core.timezone import format_datetime, now as tz_now
from app.packages.mediahub.crud.categories import category_crud, subcategory_crud
from app.packages.mediahub.crud.files import file_crud
from app.packages.mediahub.crud.publications import publication_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.models.publication import Publication, PublicationAttachment
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.category_service import normalize_slug, serialize_subcategory
from app.packages.mediahub.services.file_service import file_service
from app.packages.mediahub.services.lookups import dedupe_ids, load_all
from app.packages.mediahub.services.serializers import serialize_file, user_brief

logger = get_logger("publications")

DRAFT = PublicationStatusEnum.DRAFT.value
PENDING = PublicationStatusEnum.PENDING.value
APPROVED = PublicationStatusEnum.APPROVED.value
REJECTED = PublicationStatusEnum.REJECTED.value

# 可通过通用字段更新直接写入的属性
_PLAIN_FIELDS = (
    "description",
    "meta_title",
    "meta_description",
    "cover_image",
    "youtube_url",
    "publication_date",
)
_FLAG_FIELDS = ("has_comments", "is_featured", "is_leaderboard")

PUBLIC_POSTS_CACHE = "public-posts"


def assert_transition(current: str, target: str) -> None:
    if target == current:
        return
    if target not in PUBLICATION_TRANSITIONS.get(current, set()):
        raise AppException(f"不允许的状态流转：{current} -> {target}", HTTP_STATUS_BAD_REQUEST)


def clamp_limit(limit: int) -> int:
    return min(max(limit, 1), MAX_PAGE_LIMIT)


def can_review(user: User) -> bool:
    return has_permission(user, PERM_POSTS_APPROVE)


class PublicationService:
    """聚合发布内容相关的业务能力。"""

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    def serialize(self, item: Publication) -> dict[str, Any]:
        category = item.category
        return {
            "id": item.id,
            "title": item.title,
            "slug": item.slug,
            "description": item.description,
            "meta_title": item.meta_title,
            "meta_description": item.meta_description,
            "cover_image": item.cover_image,
            "youtube_url": item.youtube_url,
            "category_id": item.category_id,
            "category": (
                {"id": category.id, "name": category.name, "slug": category.slug} if category is not None else None
            ),
            "subcategories": [serialize_subcategory(sub) for sub in item.subcategories],
            "authors": [user_brief(author) for author in item.authors],
            "attachments": [
                {
                    "file_id": attachment.file_id,
                    "display_order": attachment.display_order,
                    "file": serialize_file(attachment.file) if attachment.file is not None else None,
                }
                for attachment in item.attachments
            ],
            "creator": user_brief(item.creator),
            "approved_by": user_brief(item.approver),
            "status": item.status,
            "rejection_reason": item.rejection_reason,
            "publication_date": format_datetime(item.publication_date),
            "has_comments": item.has_comments,
            "views": item.views,
            "unique_hits": item.unique_hits,
            "is_featured": item.is_featured,
            "is_leaderboard": item.is_leaderboard,
            "create_time": format_datetime(item.create_time),
            "update_time": format_datetime(item.update_time),
        }

    # ------------------------------------------------------------------
    # 后台查询
    # ------------------------------------------------------------------

    def list_publications(
        self,
        db: Session,
        *,
        user: User,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        author_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        page = max(page, 1)
        limit = clamp_limit(limit)
        if status is not None:
            status = self._normalize_status(status)
        items, total = publication_crud.list_with_filters(
            db,
            owner_id=None if can_review(user) else user.id,
            status=status,
            category_id=category_id,
            subcategory_id=subcategory_id,
            author_id=author_id,
            date_from=date_from,
            date_to=date_to,
            search=search,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return create_response(
            "获取发布内容列表成功",
            [self.serialize(item) for item in items],
            HTTP_STATUS_OK,
            meta=pagination_meta(total=total, page=page, limit=limit),
        )

    def counts_by_status(self, db: Session, *, user: User) -> dict:
        counts = publication_crud.count_by_status(db, owner_id=None if can_review(user) else user.id)
        return create_response("获取状态统计成功", counts, HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, user: User, publication_id: int) -> dict:
        item = self._get_or_404(db, publication_id)
        if not can_review(user) and not self._is_owner(item, user):
            raise AppException("无权查看该发布内容", HTTP_STATUS_FORBIDDEN)
        return create_response("获取发布内容详情成功", self.serialize(item), HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 后台变更
    # ------------------------------------------------------------------

    def create(self, db: Session, *, user: User, payload: dict[str, Any]) -> dict:
        title = (payload.get("title") or "").strip()
        if not title:
            raise AppException("标题不能为空", HTTP_STATUS_BAD_REQUEST)
        slug = normalize_slug(payload.get("slug"))
        self._assert_unique_slug(db, slug)
        category_id = payload.get("category_id")
        if category_id is None:
            raise AppException("请选择分类", HTTP_STATUS_BAD_REQUEST)
        self._require_category(db, category_id)

        status = self._normalize_status(payload.get("status") or PENDING)
        allowed = {DRAFT, PENDING} | ({APPROVED} if can_review(user) else set())
        if status not in allowed:
            raise AppException("新建内容只能保存为草稿或提交审核", HTTP_STATUS_BAD_REQUEST)

        item = Publication(title=title, slug=slug, category_id=category_id, creator_id=user.id, status=status)
        for field in _PLAIN_FIELDS:
            if payload.get(field) is not None:
                setattr(item, field, payload[field])
        for field in _FLAG_FIELDS:
            if payload.get(field) is not None:
                setattr(item, field, bool(payload[field]))
        if status == APPROVED:
            item.approved_by = user.id
            item.publication_date = item.publication_date or tz_now()

        item.subcategories = load_all(db, subcategory_crud, payload.get("subcategory_ids"), label="子分类")
        author_ids = payload.get("author_ids")
        item.authors = load_all(db, user_crud, author_ids, label="作者") if author_ids else [user]
        item.attachments = self._build_attachments(db, user, payload.get("attachment_ids"))

        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Publication %s (%s) created by %s as %s", item.id, item.slug, user.id, status)
        self._evict_public_cache()
        return create_response("创建发布内容成功", self.serialize(item), HTTP_STATUS_OK)

    def update(self, db: Session, *, user: User, publication_id: int, changes: dict[str, Any]) -> dict:
        """``changes`` 只包含调用方显式提交的字段。"""
        item = self._get_or_404(db, publication_id)
        ensure_owner_or_admin(user, item.creator_id, message="只能编辑自己创建的发布内容")
        reviewer = can_review(user)

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise AppException("标题不能为空", HTTP_STATUS_BAD_REQUEST)
            item.title = title
        if "slug" in changes:
            slug = normalize_slug(changes["slug"])
            self._assert_unique_slug(db, slug, exclude_id=item.id)
            item.slug = slug
        if changes.get("category_id") is not None:
            self._require_category(db, changes["category_id"])
            item.category_id = changes["category_id"]
        for field in _PLAIN_FIELDS:
            if field in changes:
                setattr(item, field, changes[field])
        for field in _FLAG_FIELDS:
            if changes.get(field) is not None:
                setattr(item, field, bool(changes[field]))
        if changes.get("subcategory_ids") is not None:
            item.subcategories = load_all(db, subcategory_crud, changes["subcategory_ids"], label="子分类")
        if changes.get("author_ids") is not None:
            item.authors = load_all(db, user_crud, changes["author_ids"], label="作者") or [item.creator]
        if changes.get("attachment_ids") is not None:
            item.attachments = self._build_attachments(db, user, changes["attachment_ids"])

        requested = changes.get("status")
        if requested:
            target = self._normalize_status(requested)
            if target in {APPROVED, REJECTED} and not reviewer:
                raise AppException("只有审核人员可以审核发布内容", HTTP_STATUS_FORBIDDEN)
            if target == REJECTED and target != item.status:
                raise AppException("请使用拒绝接口并填写拒绝原因", HTTP_STATUS_BAD_REQUEST)
            assert_transition(item.status, target)
            if target == APPROVED and item.status != APPROVED:
                self._mark_approved(item, user)
            item.status = target
        elif not reviewer and item.status in {APPROVED, REJECTED}:
            item.status = PENDING

        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Publication %s updated by %s (status=%s)", item.id, user.id, item.status)
        self._evict_public_cache()
        return create_response("更新发布内容成功", self.serialize(item), HTTP_STATUS_OK)

    def delete(self, db: Session, *, user: User, publication_id: int) -> dict:
        item = self._get_or_404(db, publication_id)
        ensure_owner_or_admin(user, item.creator_id, message="只能删除自己创建的发布内容")
        publication_crud.soft_delete(db, item)
        logger.info("Publication %s deleted by %s", publication_id, user.id)
        self._evict_public_cache()
        return create_response("删除发布内容成功", {"id": publication_id}, HTTP_STATUS_OK)

    def approve(
        self,
        db: Session,
        *,
        user: User,
        publication_id: int,
        publication_date: Optional[datetime] = None,
    ) -> dict:
        item = self._get_or_404(db, publication_id)
        if item.status == APPROVED:
            raise AppException("该内容已审核通过", HTTP_STATUS_BAD_REQUEST)
        assert_transition(item.status, APPROVED)
        if publication_date is not None:
            item.publication_date = publication_date
        self._mark_approved(item, user)
        item.status = APPROVED
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Publication %s approved by %s", item.id, user.id)
        self._evict_public_cache()
        return create_response("审核通过", self.serialize(item), HTTP_STATUS_OK)

    def reject(self, db: Session, *, user: User, publication_id: int, reason: Optional[str]) -> dict:
        normalized_reason = (reason or "").strip()
        if not normalized_reason:
            raise AppException("请填写拒绝原因", HTTP_STATUS_BAD_REQUEST)
        item = self._get_or_404(db, publication_id)
        if item.status == REJECTED:
            raise AppException("该内容已被拒绝", HTTP_STATUS_BAD_REQUEST)
        assert_transition(item.status, REJECTED)
        item.status = REJECTED
        item.rejection_reason = normalized_reason
        item.approved_by = user.id
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Publication %s rejected by %s", item.id, user.id)
        self._evict_public_cache()
        return create_response("已拒绝该内容", self.serialize(item), HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 公开访问
    # ------------------------------------------------------------------

    def list_public(
        self,
        db: Session,
        *,
        category_id: Optional[int] = None,
        category_slug: Optional[str] = None,
        subcategory_id: Optional[int] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        leaderboard: Optional[bool] = None,
        order_by_views: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        page = max(page, 1)
        limit = clamp_limit(limit)
        if category_slug:
            category = category_crud.get_by_slug(db, category_slug)
            if category is None:
                raise AppException("分类不存在", HTTP_STATUS_NOT_FOUND)
            category_id = category.id

        cache = get_cache()
        parts = (
            category_id,
            subcategory_id,
            (search or "").strip().lower() or None,
            featured,
            leaderboard,
            int(order_by_views),
            page,
            limit,
        )
        signature = ":".join(str(part if part is not None else "-") for part in parts)
        key = cache.build_key(PUBLIC_POSTS_CACHE, signature, public=True)
        cached = cache.get(key)
        if cached is not None:
            return create_response("获取发布内容成功", cached["items"], HTTP_STATUS_OK, meta=cached["meta"])

        items, total = publication_crud.list_published(
            db,
            now=tz_now(),
            category_id=category_id,
            subcategory_id=subcategory_id,
            search=search,
            featured=featured,
            leaderboard=leaderboard,
            order_by_views=order_by_views,
            skip=(page - 1) * limit,
            limit=limit,
        )
        payload = {
            "items": [self.serialize(item) for item in items],
            "meta": pagination_meta(total=total, page=page, limit=limit),
        }
        cache.set(key, payload, entity=PUBLIC_POSTS_CACHE)
        return create_response("获取发布内容成功", payload["items"], HTTP_STATUS_OK, meta=payload["meta"])

    def featured(self, db: Session, *, limit: int = 10) -> dict:
        return self.list_public(db, featured=True, limit=limit)

    def leaderboard(self, db: Session, *, limit: int = 10) -> dict:
        return self.list_public(db, leaderboard=True, order_by_views=True, limit=limit)

    def search_public(self, db: Session, *, query: str, page: int = 1, limit: int = 20) -> dict:
        keyword = (query or "").strip()
        if not keyword:
            raise AppException("搜索关键字不能为空", HTTP_STATUS_BAD_REQUEST)
        return self.list_public(db, search=keyword, page=page, limit=limit)

    def view_by_slug(self, db: Session, *, slug: str, client_key: Optional[str] = None) -> dict:
        """访问已发布内容：浏览量加一，同一访客在缓存窗口内只计一次独立访问。"""
        item = publication_crud.published_query(db, now=tz_now()).filter(Publication.slug == slug.strip().lower()).first()
        if item is None:
            raise AppException("发布内容不存在", HTTP_STATUS_NOT_FOUND)

        item.views = (item.views or 0) + 1
        if client_key:
            cache = get_cache()
            key = cache.build_key("post-view", f"{item.id}:{client_key}")
            if cache.get(key) is None:
                item.unique_hits = (item.unique_hits or 0) + 1
                cache.set(key, 1, entity="post-view")
        db.add(item)
        db.commit()
        db.refresh(item)
        return create_response("获取发布内容成功", self.serialize(item), HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 内部辅助方法
    # ------------------------------------------------------------------

    def _get_or_404(self, db: Session, publication_id: int) -> Publication:
        item = publication_crud.get(db, publication_id)
        if item is None:
            raise AppException("发布内容不存在", HTTP_STATUS_NOT_FOUND)
        return item

    @staticmethod
    def _is_owner(item: Publication, user: User) -> bool:
        return item.creator_id == user.id or any(author.id == user.id for author in item.authors)

    @staticmethod
    def _normalize_status(status: str) -> str:
        candidate = (status or "").strip().lower()
        if candidate not in {item.value for item in PublicationStatusEnum}:
            raise AppException("未知的发布状态", HTTP_STATUS_BAD_REQUEST)
        return candidate

    @staticmethod
    def _mark_approved(item: Publication, user: User) -> None:
        item.approved_by = user.id
        item.rejection_reason = None
        if item.publication_date is None:
            item.publication_date = tz_now()

    def _require_category(self, db: Session, category_id: int) -> None:
        if category_crud.get(db, category_id) is None:
            raise AppException("分类不存在", HTTP_STATUS_NOT_FOUND)

    def _assert_unique_slug(self, db: Session, slug: str, *, exclude_id: Optional[int] = None) -> None:
        existing = publication_crud.get_by_slug(db, slug)
        if existing is not None and existing.id != exclude_id:
            raise AppException("发布内容别名已存在", HTTP_STATUS_CONFLICT)

    def _build_attachments(
        self, db: Session, user: User, file_ids: Optional[Iterable[int]]
    ) -> list[PublicationAttachment]:
        requested = dedupe_ids(file_ids)
        files = load_all(db, file_crud, requested, label="附件文件")
        for record in files:
            if not file_service.can_access(db, user=user, record=record):
                raise AppException(f"无权使用文件：{record.original_name}", HTTP_STATUS_FORBIDDEN)
        return [
            PublicationAttachment(file_id=record.id, display_order=index)
            for index, record in enumerate(files)
        ]

    @staticmethod
    def _evict_public_cache() -> None:
        get_cache().invalidate(PUBLIC_POSTS_CACHE)


publication_service = PublicationService()
