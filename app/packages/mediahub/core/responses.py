"""响应封装：构建系统统一的返回结构。"""

from typing import Any, Optional

from app.packages.mediahub.core.constants import HTTP_STATUS_OK


def create_response(
    msg: str,
    data: Any = None,
    code: int = HTTP_STATUS_OK,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """按照 ``msg``、``data``、``code`` 组合出统一响应体，分页信息放在 ``meta``。"""
    payload: dict[str, Any] = {"msg": msg, "data": data, "code": code}
    if meta is not None:
        payload["meta"] = meta
    return payload


def pagination_meta(*, total: int, page: int, limit: int) -> dict[str, int]:
    """生成 ``{total, page, limit, total_pages}`` 分页元数据。"""
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return {"total": total, "page": page, "limit": limit, "total_pages": total_pages}
