"""缓存管理服务：供管理员查看与清理缓存条目。"""

from __future__ import annotations

import json
from typing import Optional

from app.packages.mediahub.core.cache import get_cache
from app.packages.mediahub.core.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_NOT_FOUND, HTTP_STATUS_OK
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response

logger = get_logger("cache")


class CacheService:
    def stats(self) -> dict:
        return create_response("获取缓存统计成功", get_cache().stats(), HTTP_STATUS_OK)

    def list_keys(self, *, pattern: Optional[str] = None) -> dict:
        keys = get_cache().keys(pattern or "*")
        return create_response("获取缓存键成功", {"total": len(keys), "keys": keys}, HTTP_STATUS_OK)

    def get_key(self, key: str) -> dict:
        cache = get_cache()
        raw = cache.get_raw(key)
        if raw is None:
            raise AppException("缓存键不存在", HTTP_STATUS_NOT_FOUND)
        try:
            value = json.loads(raw)
        except ValueError:
            value = raw
        data = {"key": cache.qualify(key), "value": value, "ttl": cache.ttl(key)}
        return create_response("获取缓存值成功", data, HTTP_STATUS_OK)

    def delete_key(self, key: str) -> dict:
        cache = get_cache()
        removed = cache.delete(key)
        if not removed:
            raise AppException("缓存键不存在", HTTP_STATUS_NOT_FOUND)
        logger.info("Cache key %s deleted", cache.qualify(key))
        return create_response("删除缓存键成功", {"deleted": removed}, HTTP_STATUS_OK)

    def delete_pattern(self, pattern: Optional[str]) -> dict:
        normalized = (pattern or "").strip()
        if not normalized:
            raise AppException("请提供匹配模式", HTTP_STATUS_BAD_REQUEST)
        removed = get_cache().delete_pattern(normalized)
        logger.info("Cache pattern %s evicted %s keys", normalized, removed)
        return create_response("按模式清除缓存成功", {"deleted": removed}, HTTP_STATUS_OK)

    def flush(self) -> dict:
        removed = get_cache().flush()
        logger.info("Cache flushed (%s keys)", removed)
        return create_response("清空缓存成功", {"deleted": removed}, HTTP_STATUS_OK)


cache_service = CacheService()
