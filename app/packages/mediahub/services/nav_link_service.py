"""导航链接服务。

``url`` 与 ``route`` 互斥：提交 ``url`` 视为外部链接，提交 ``route`` 视为站内路由。
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_NOT_FOUND, HTTP_STATUS_OK
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.core.timezone import format_datetime
from app.packages.mediahub.crud.nav_links import nav_link_crud
from app.packages.mediahub.models.nav_link import NavLink
from app.packages.mediahub.services.category_service import require_name

logger = get_logger("nav_links")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class NavLinkService:
    def serialize(self, link: NavLink) -> dict[str, Any]:
        return {
            "id": link.id,
            "label": link.label,
            "url": link.url,
            "route": link.route,
            "external": link.external,
            "display_order": link.display_order,
            "is_active": link.is_active,
            "create_time": format_datetime(link.create_time),
            "update_time": format_datetime(link.update_time),
        }

    def list_links(self, db: Session, *, active_only: bool = False) -> dict:
        items = nav_link_crud.list_ordered(db, active_only=active_only)
        return create_response("获取导航链接成功", [self.serialize(item) for item in items], HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, link_id: int) -> dict:
        return create_response("获取导航链接详情成功", self.serialize(self._get_or_404(db, link_id)), HTTP_STATUS_OK)

    def create(
        self,
        db: Session,
        *,
        label: str,
        url: Optional[str] = None,
        route: Optional[str] = None,
        display_order: int = 0,
        is_active: bool = True,
    ) -> dict:
        url, route = _clean(url), _clean(route)
        if bool(url) == bool(route):
            raise AppException("链接地址与站内路由必须且只能填写一项", HTTP_STATUS_BAD_REQUEST)
        link = NavLink(
            label=require_name(label, message="链接名称不能为空"),
            url=url,
            route=route,
            external=bool(url),
            display_order=display_order,
            is_active=is_active,
        )
        nav_link_crud.save(db, link)
        logger.info("Nav link %s created", link.id)
        return create_response("创建导航链接成功", self.serialize(link), HTTP_STATUS_OK)

    def update(self, db: Session, *, link_id: int, changes: dict[str, Any]) -> dict:
        link = self._get_or_404(db, link_id)
        url = _clean(changes.get("url"))
        route = _clean(changes.get("route"))
        if url and route:
            raise AppException("链接地址与站内路由必须且只能填写一项", HTTP_STATUS_BAD_REQUEST)
        if url:
            link.url, link.route, link.external = url, None, True
        elif route:
            link.url, link.route, link.external = None, route, False
        if "label" in changes:
            link.label = require_name(changes["label"], message="链接名称不能为空")
        if changes.get("display_order") is not None:
            link.display_order = changes["display_order"]
        if changes.get("is_active") is not None:
            link.is_active = bool(changes["is_active"])
        nav_link_crud.save(db, link)
        return create_response("更新导航链接成功", self.serialize(link), HTTP_STATUS_OK)

    def delete(self, db: Session, *, link_id: int) -> dict:
        link = self._get_or_404(db, link_id)
        nav_link_crud.soft_delete(db, link)
        logger.info("Nav link %s deleted", link_id)
        return create_response("删除导航链接成功", {"id": link_id}, HTTP_STATUS_OK)

    def _get_or_404(self, db: Session, link_id: int) -> NavLink:
        link = nav_link_crud.get(db, link_id)
        if link is None:
            raise AppException("导航链接不存在", HTTP_STATUS_NOT_FOUND)
        return link


nav_link_service = NavLinkService()
