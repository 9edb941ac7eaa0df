"""分类服务：分类的增删改查以及与子分类的关联同步。"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.cache import get_cache
from app.packages.mediahub.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
)
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.core.timezone import format_datetime
from app.packages.mediahub.crud.categories import category_crud, subcategory_crud
from app.packages.mediahub.crud.publications import publication_crud
from app.packages.mediahub.models.category import Category, Subcategory
from app.packages.mediahub.services.lookups import load_all

logger = get_logger("categories")


def normalize_slug(slug: Optional[str]) -> str:
    normalized = (slug or "").strip().lower()
    if not normalized:
        raise AppException("别名不能为空", HTTP_STATUS_BAD_REQUEST)
    return normalized


def require_name(name: Optional[str], *, message: str = "名称不能为空") -> str:
    normalized = (name or "").strip()
    if not normalized:
        raise AppException(message, HTTP_STATUS_BAD_REQUEST)
    return normalized


def serialize_subcategory(item: Subcategory) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "slug": item.slug,
        "description": item.description,
    }


class CategoryService:
    """聚合分类管理相关的业务能力。"""

    def serialize(self, category: Category, *, include_subcategories: bool = True) -> dict[str, Any]:
        data = {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "cover_image": category.cover_image,
            "show_on_menu": category.show_on_menu,
            "menu_order": category.menu_order,
            "create_time": format_datetime(category.create_time),
            "update_time": format_datetime(category.update_time),
        }
        if include_subcategories:
            data["subcategories"] = [
                serialize_subcategory(item) for item in category.subcategories if not item.is_deleted
            ]
        return data

    def list_categories(self, db: Session, *, show_on_menu: Optional[bool] = None) -> dict:
        items = category_crud.list_ordered(db, show_on_menu=show_on_menu)
        return create_response("获取分类列表成功", [self.serialize(item) for item in items], HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, category_id: int) -> dict:
        return create_response("获取分类详情成功", self.serialize(self.get_or_404(db, category_id)), HTTP_STATUS_OK)

    def get_by_slug(self, db: Session, *, slug: str) -> dict:
        category = category_crud.get_by_slug(db, slug)
        if category is None:
            raise AppException("分类不存在", HTTP_STATUS_NOT_FOUND)
        return create_response("获取分类详情成功", self.serialize(category), HTTP_STATUS_OK)

    def create(
        self,
        db: Session,
        *,
        name: str,
        slug: str,
        description: Optional[str] = None,
        cover_image: Optional[str] = None,
        show_on_menu: bool = True,
        menu_order: int = 0,
        subcategory_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        normalized_slug = normalize_slug(slug)
        self._assert_unique_slug(db, normalized_slug)
        category = Category(
            name=require_name(name, message="分类名称不能为空"),
            slug=normalized_slug,
            description=description,
            cover_image=cover_image,
            show_on_menu=show_on_menu,
            menu_order=menu_order,
        )
        if subcategory_ids:
            category.subcategories = load_all(db, subcategory_crud, subcategory_ids, label="子分类")
        db.add(category)
        db.commit()
        db.refresh(category)
        logger.info("Category %s (%s) created", category.id, category.slug)
        get_cache().invalidate("public-posts")
        return create_response("创建分类成功", self.serialize(category), HTTP_STATUS_OK)

    def update(self, db: Session, *, category_id: int, changes: dict[str, Any]) -> dict:
        """``changes`` 只包含调用方显式提交的字段。"""
        category = self.get_or_404(db, category_id)
        if "name" in changes:
            category.name = require_name(changes["name"], message="分类名称不能为空")
        if "slug" in changes:
            normalized_slug = normalize_slug(changes["slug"])
            self._assert_unique_slug(db, normalized_slug, exclude_id=category.id)
            category.slug = normalized_slug
        for field in ("description", "cover_image"):
            if field in changes:
                setattr(category, field, changes[field])
        for field in ("show_on_menu", "menu_order"):
            if field in changes and changes[field] is not None:
                setattr(category, field, changes[field])
        if "subcategory_ids" in changes and changes["subcategory_ids"] is not None:
            self._sync_subcategories(db, category, changes["subcategory_ids"])

        db.add(category)
        db.commit()
        db.refresh(category)
        logger.info("Category %s updated", category.id)
        get_cache().invalidate("public-posts")
        return create_response("更新分类成功", self.serialize(category), HTTP_STATUS_OK)

    def delete(self, db: Session, *, category_id: int) -> dict:
        category = self.get_or_404(db, category_id)
        if publication_crud.count_referencing_category(db, category.id):
            raise AppException("该分类下存在发布内容，无法删除", HTTP_STATUS_BAD_REQUEST)
        category.subcategories = []
        category_crud.soft_delete(db, category)
        logger.info("Category %s deleted", category_id)
        get_cache().invalidate("public-posts")
        return create_response("删除分类成功", {"id": category_id}, HTTP_STATUS_OK)

    def get_or_404(self, db: Session, category_id: int) -> Category:
        category = category_crud.get(db, category_id)
        if category is None:
            raise AppException("分类不存在", HTTP_STATUS_NOT_FOUND)
        return category

    def _assert_unique_slug(self, db: Session, slug: str, *, exclude_id: Optional[int] = None) -> None:
        existing = category_crud.get_by_slug(db, slug)
        if existing is not None and existing.id != exclude_id:
            raise AppException("分类别名已存在", HTTP_STATUS_CONFLICT)

    def _sync_subcategories(self, db: Session, category: Category, subcategory_ids: Iterable[int]) -> None:
        """按差集增删关联，保留未变化的子分类。"""
        desired = load_all(db, subcategory_crud, subcategory_ids, label="子分类")
        desired_ids = {item.id for item in desired}
        current_ids = {item.id for item in category.subcategories}
        for item in list(category.subcategories):
            if item.id not in desired_ids:
                category.subcategories.remove(item)
        for item in desired:
            if item.id not in current_ids:
                category.subcategories.append(item)


category_service = CategoryService()
