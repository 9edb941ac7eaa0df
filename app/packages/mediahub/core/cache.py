"""缓存层：Redis 优先，不可用时回退到进程内存。

键格式：``<prefix>:<entity>[:user:<id>|:public][:<id>]``，例如
``mediahub:filemanager:folders-tree:user:3:root``。
"""

from __future__ import annotations

import fnmatch
import json
import threading
import time
from typing import Any, Iterable, Optional

import redis

from app.packages.mediahub.core.config import get_settings
from app.packages.mediahub.core.logger import logger

DEFAULT_TTL = 3600

# 各实体的过期时间（秒）
CACHE_TTL = {
    "user": 1800,
    "file": 3600,
    "folder": 3600,
    "files": 300,
    "folders": 300,
    "folders-tree": 300,
    "thumbnail": 86400,
    "public-posts": 300,
    "post-view": 86400,
}


class CacheBackend:
    """缓存后端基类。"""

    name = "base"

    def get(self, key: str) -> Optional[str]:  # pragma: no cover - interface definition
        raise NotImplementedError

    def set(self, key: str, value: str, ttl: int) -> None:  # pragma: no cover
        raise NotImplementedError

    def delete(self, key: str) -> int:  # pragma: no cover
        raise NotImplementedError

    def keys(self, pattern: str) -> list[str]:  # pragma: no cover
        raise NotImplementedError

    def ttl(self, key: str) -> Optional[int]:  # pragma: no cover
        raise NotImplementedError

    def delete_many(self, keys: Iterable[str]) -> int:
        return sum(self.delete(key) for key in keys)


class RedisCacheBackend(CacheBackend):
    """基于 Redis 的缓存后端。"""

    name = "redis"

    def __init__(self, url: str) -> None:
        self._client = redis.Redis.from_url(url, decode_responses=True)
        self._client.ping()

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self._client.set(key, value, ex=max(int(ttl), 1))

    def delete(self, key: str) -> int:
        return int(self._client.delete(key))

    def delete_many(self, keys: Iterable[str]) -> int:
        batch = list(keys)
        if not batch:
            return 0
        return int(self._client.delete(*batch))

    def keys(self, pattern: str) -> list[str]:
        return sorted(self._client.scan_iter(match=pattern, count=500))

    def ttl(self, key: str) -> Optional[int]:
        remaining = self._client.ttl(key)
        return remaining if remaining is not None and remaining >= 0 else None


class InMemoryCacheBackend(CacheBackend):
    """内存后端用于测试或缺少 Redis 时的回退实现。"""

    name = "memory"

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            record = self._store.get(key)
            if record is None:
                return None
            value, expires_at = record
            if expires_at < time.monotonic():
                self._store.pop(key, None)
                return None
            return value

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            self._store[key] = (value, time.monotonic() + max(int(ttl), 1))

    def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._store.pop(key, None) is not None else 0

    def keys(self, pattern: str) -> list[str]:
        now = time.monotonic()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._store.items() if expires_at < now]
            for key in expired:
                self._store.pop(key, None)
            return sorted(key for key in self._store if fnmatch.fnmatchcase(key, pattern))

    def ttl(self, key: str) -> Optional[int]:
        with self._lock:
            record = self._store.get(key)
        if record is None:
            return None
        return max(int(record[1] - time.monotonic()), 0)


class Cache:
    """面向业务的缓存门面：负责键名构造、JSON 序列化与命中统计。"""

    def __init__(self, backend: CacheBackend, *, prefix: str, enabled: bool = True) -> None:
        self.backend = backend
        self.prefix = prefix.rstrip(":")
        self.enabled = enabled
        self.hits = 0
        self.misses = 0

    def build_key(
        self,
        entity: str,
        identifier: Any = None,
        *,
        user_id: Optional[int] = None,
        public: bool = False,
    ) -> str:
        parts = [self.prefix, entity]
        if user_id is not None:
            parts.extend(["user", str(user_id)])
        elif public:
            parts.append("public")
        if identifier is not None:
            parts.append(str(identifier))
        return ":".join(parts)

    def qualify(self, key_or_pattern: str) -> str:
        """为未携带前缀的键或模式补齐前缀。"""
        if key_or_pattern.startswith(f"{self.prefix}:"):
            return key_or_pattern
        return f"{self.prefix}:{key_or_pattern.lstrip(':')}"

    def get(self, key: str) -> Any:
        if not self.enabled:
            return None
        raw = self.backend.get(key)
        if raw is None:
            self.misses += 1
            return None
        self.hits += 1
        return json.loads(raw)

    def set(self, key: str, value: Any, *, entity: Optional[str] = None, ttl: Optional[int] = None) -> None:
        if not self.enabled:
            return
        if ttl is None:
            ttl = CACHE_TTL.get(entity or "", DEFAULT_TTL)
        self.backend.set(key, json.dumps(value, ensure_ascii=False, default=str), ttl)

    def get_raw(self, key: str) -> Optional[str]:
        return self.backend.get(self.qualify(key))

    def delete(self, key: str) -> int:
        return self.backend.delete(self.qualify(key))

    def keys(self, pattern: str = "*") -> list[str]:
        return self.backend.keys(self.qualify(pattern))

    def ttl(self, key: str) -> Optional[int]:
        return self.backend.ttl(self.qualify(key))

    def delete_pattern(self, pattern: str) -> int:
        """删除匹配通配模式（支持 ``*``）的所有键。"""
        keys = self.keys(pattern)
        removed = self.backend.delete_many(keys)
        if removed:
            logger.debug("Cache evicted %s keys for pattern %s", removed, pattern)
        return removed

    def invalidate(self, *entities: str) -> int:
        """清除指定实体的全部缓存条目。"""
        removed = 0
        for entity in entities:
            removed += self.backend.delete(self.build_key(entity))
            removed += self.delete_pattern(f"{entity}:*")
        return removed

    def flush(self) -> int:
        """仅清空本应用前缀下的键，不影响同一 Redis 中的其他数据。"""
        removed = self.delete_pattern("*")
        self.hits = 0
        self.misses = 0
        return removed

    def stats(self) -> dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "backend": self.backend.name,
            "enabled": self.enabled,
            "prefix": self.prefix,
            "key_count": len(self.keys("*")),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / lookups, 4) if lookups else 0.0,
        }


_cache: Optional[Cache] = None
_cache_lock = threading.Lock()


def _build_backend() -> CacheBackend:
    settings = get_settings()
    if settings.cache_backend.lower() == "memory":
        return InMemoryCacheBackend()
    try:
        backend = RedisCacheBackend(settings.redis_url)
        logger.info("Cache initialized with Redis at %s", settings.redis_url)
        return backend
    except redis.RedisError as exc:  # pragma: no cover - fallback path
        logger.warning("Redis unavailable (%s), falling back to in-memory cache", exc)
        return InMemoryCacheBackend()


def get_cache() -> Cache:
    """返回进程级缓存单例，首次调用时探测 Redis 可用性。"""
    global _cache
    if _cache is not None:
        return _cache
    with _cache_lock:
        if _cache is None:
            settings = get_settings()
            _cache = Cache(_build_backend(), prefix=settings.cache_key_prefix, enabled=settings.cache_enabled)
    return _cache


def reset_cache(backend: Optional[CacheBackend] = None) -> Cache:
    """替换缓存后端（测试或运维切换时使用）。"""
    global _cache
    settings = get_settings()
    with _cache_lock:
        _cache = Cache(
            backend or InMemoryCacheBackend(),
            prefix=settings.cache_key_prefix,
            enabled=settings.cache_enabled,
        )
    return _cache
