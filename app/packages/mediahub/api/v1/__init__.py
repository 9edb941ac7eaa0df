"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from app.packages.mediahub.api.v1.endpoints import (
    auth,
    cache,
    categories,
    dashboard,
    files,
    folders,
    nav_links,
    permissions,
    public,
    publications,
    roles,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(folders.router)
api_router.include_router(files.router)
api_router.include_router(categories.router)
api_router.include_router(categories.subcategory_router)
api_router.include_router(publications.router)
api_router.include_router(public.router)
api_router.include_router(roles.router)
api_router.include_router(permissions.router)
api_router.include_router(nav_links.router)
api_router.include_router(cache.router)
api_router.include_router(dashboard.router)
