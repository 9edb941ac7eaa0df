"""缓存管理路由，仅管理员可用。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.packages.mediahub.api.v1.schemas.common import DictResponse
from app.packages.mediahub.core.dependencies import require_admin
from app.packages.mediahub.services.cache_service import cache_service

router = APIRouter(prefix="/cache", tags=["cache"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=DictResponse)
def cache_stats() -> DictResponse:
    return cache_service.stats()


@router.get("/keys", response_model=DictResponse)
def list_keys(pattern: Optional[str] = Query(None, description="通配模式，例如 folders:*")) -> DictResponse:
    return cache_service.list_keys(pattern=pattern)


@router.get("/keys/{key:path}", response_model=DictResponse)
def get_key(key: str) -> DictResponse:
    return cache_service.get_key(key)


@router.delete("/keys/{key:path}", response_model=DictResponse)
def delete_key(key: str) -> DictResponse:
    return cache_service.delete_key(key)


@router.delete("/pattern", response_model=DictResponse)
def delete_pattern(pattern: Optional[str] = Query(None)) -> DictResponse:
    return cache_service.delete_pattern(pattern)


@router.delete("/flush", response_model=DictResponse)
def flush_cache() -> DictResponse:
    return cache_service.flush()
