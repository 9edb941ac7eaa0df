"""子分类服务。"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import HTTP_STATUS_CONFLICT, HTTP_STATUS_NOT_FOUND, HTTP_STATUS_OK
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.crud.categories import category_crud, subcategory_crud
from app.packages.mediahub.models.category import Subcategory
from app.packages.mediahub.services.category_service import normalize_slug, require_name, serialize_subcategory
from app.packages.mediahub.services.lookups import load_all

logger = get_logger("subcategories")


class SubcategoryService:
    def serialize(self, item: Subcategory) -> dict[str, Any]:
        data = serialize_subcategory(item)
        data["category_ids"] = sorted(category.id for category in item.categories if not category.is_deleted)
        return data

    def list_subcategories(self, db: Session, *, category_id: Optional[int] = None) -> dict:
        items = subcategory_crud.list_ordered(db, category_id=category_id)
        return create_response("获取子分类列表成功", [self.serialize(item) for item in items], HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, subcategory_id: int) -> dict:
        return create_response("获取子分类详情成功", self.serialize(self._get_or_404(db, subcategory_id)), HTTP_STATUS_OK)

    def create(
        self,
        db: Session,
        *,
        name: str,
        slug: str,
        description: Optional[str] = None,
        category_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        normalized_slug = normalize_slug(slug)
        self._assert_unique_slug(db, normalized_slug)
        item = Subcategory(
            name=require_name(name, message="子分类名称不能为空"),
            slug=normalized_slug,
            description=description,
        )
        if category_ids:
            item.categories = load_all(db, category_crud, category_ids, label="分类")
        db.add(item)
        db.commit()
        db.refresh(item)
        logger.info("Subcategory %s (%s) created", item.id, item.slug)
        return create_response("创建子分类成功", self.serialize(item), HTTP_STATUS_OK)

    def update(self, db: Session, *, subcategory_id: int, changes: dict[str, Any]) -> dict:
        item = self._get_or_404(db, subcategory_id)
        if "name" in changes:
            item.name = require_name(changes["name"], message="子分类名称不能为空")
        if "slug" in changes:
            normalized_slug = normalize_slug(changes["slug"])
            self._assert_unique_slug(db, normalized_slug, exclude_id=item.id)
            item.slug = normalized_slug
        if "description" in changes:
            item.description = changes["description"]
        if changes.get("category_ids") is not None:
            item.categories = load_all(db, category_crud, changes["category_ids"], label="分类")
        db.add(item)
        db.commit()
        db.refresh(item)
        return create_response("更新子分类成功", self.serialize(item), HTTP_STATUS_OK)

    def delete(self, db: Session, *, subcategory_id: int) -> dict:
        item = self._get_or_404(db, subcategory_id)
        item.categories = []
        subcategory_crud.soft_delete(db, item)
        logger.info("Subcategory %s deleted", subcategory_id)
        return create_response("删除子分类成功", {"id": subcategory_id}, HTTP_STATUS_OK)

    def _get_or_404(self, db: Session, subcategory_id: int) -> Subcategory:
        item = subcategory_crud.get(db, subcategory_id)
        if item is None:
            raise AppException("子分类不存在", HTTP_STATUS_NOT_FOUND)
        return item

    def _assert_unique_slug(self, db: Session, slug: str, *, exclude_id: Optional[int] = None) -> None:
        existing = subcategory_crud.get_by_slug(db, slug)
        if existing is not None and existing.id != exclude_id:
            raise AppException("子分类别名已存在", HTTP_STATUS_CONFLICT)


subcategory_service = SubcategoryService()
