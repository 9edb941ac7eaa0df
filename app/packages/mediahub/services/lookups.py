"""按主键批量加载关联实体的辅助函数。"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import HTTP_STATUS_NOT_FOUND
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.crud.base import CRUDBase


def dedupe_ids(ids: Optional[Iterable[int]]) -> list[int]:
    """去重并过滤空值，保持原有顺序。"""
    requested: list[int] = []
    seen: set[int] = set()
    for item in ids or []:
        if item is None:
            continue
        value = int(item)
        if value <= 0 or value in seen:
            continue
        seen.add(value)
        requested.append(value)
    return requested


def load_all(db: Session, crud: CRUDBase, ids: Optional[Iterable[int]], *, label: str) -> list:
    """加载全部主键对应的实体，任一缺失时返回 404 并列出缺失的主键。"""
    requested = dedupe_ids(ids)
    if not requested:
        return []
    found = {item.id: item for item in crud.list_by_ids(db, requested)}
    missing = [item for item in requested if item not in found]
    if missing:
        raise AppException(
            f"部分{label}不存在：{', '.join(str(item) for item in missing)}",
            HTTP_STATUS_NOT_FOUND,
        )
    return [found[item] for item in requested]
