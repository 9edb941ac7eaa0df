"""仪表盘统计路由，仅管理员可用。"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse, ListResponse
from app.packages.mediahub.core.dependencies import get_db, require_admin
from app.packages.mediahub.services.analytics_service import analytics_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(require_admin)])


@router.get("/overview", response_model=DictResponse)
def overview(db: Session = Depends(get_db)) -> DictResponse:
    return analytics_service.overview(db)


@router.get("/publications", response_model=DictResponse)
def publication_stats(db: Session = Depends(get_db)) -> DictResponse:
    return analytics_service.publication_stats(db)


@router.get("/monthly", response_model=ListResponse)
def monthly_stats(months: int = Query(12, ge=1, le=36), db: Session = Depends(get_db)) -> ListResponse:
    return analytics_service.monthly_stats(db, months=months)


@router.get("/top-publications", response_model=ListResponse)
def top_publications(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)) -> ListResponse:
    return analytics_service.top_publications(db, limit=limit)


@router.get("/top-categories", response_model=ListResponse)
def top_categories(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)) -> ListResponse:
    return analytics_service.top_categories(db, limit=limit)


@router.get("/user-activity", response_model=DictResponse)
def user_activity(db: Session = Depends(get_db)) -> DictResponse:
    return analytics_service.user_activity(db)
