"""MIME 类型匹配，服务端上传校验与前端选择过滤共用。"""

from __future__ import annotations

from typing import Sequence


def mime_allowed(mime_type: str, allowed: Sequence[str]) -> bool:
    """判断 MIME 是否在允许列表中，支持 ``image/*`` 形式的通配；列表为空表示不限制。"""
    if not allowed:
        return True
    candidate = (mime_type or "").strip().lower()
    for pattern in allowed:
        if pattern == "*/*" or pattern == candidate:
            return True
        if pattern.endswith("/*") and candidate.startswith(pattern[:-1]):
            return True
    return False
