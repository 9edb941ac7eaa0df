"""文件夹路由：列表、目录树、增删改与共享。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas.common import DictResponse, ShareRequest
from app.packages.mediahub.api.v1.schemas.folders import (
    FolderCreateRequest,
    FolderListResponse,
    FolderResponse,
    FolderTreeResponse,
    FolderUpdateRequest,
)
from app.packages.mediahub.core.dependencies import get_current_active_user, get_db
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.folder_service import folder_service

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get("", response_model=FolderListResponse)
def list_folders(
    parent_id: Optional[int] = Query(None, alias="parentId", description="父文件夹，为空表示根目录"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderListResponse:
    return folder_service.list_folders(db, user=current_user, parent_id=parent_id)


@router.get("/tree", response_model=FolderTreeResponse)
def get_tree(
    parent_id: Optional[int] = Query(None, alias="parentId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderTreeResponse:
    return folder_service.get_tree(db, user=current_user, parent_id=parent_id)


@router.get("/shared-with-me", response_model=FolderListResponse)
def shared_with_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderListResponse:
    return folder_service.shared_with_me(db, user=current_user)


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderResponse:
    return folder_service.get_detail(db, user=current_user, folder_id=folder_id)


@router.post("", response_model=FolderResponse)
def create_folder(
    payload: FolderCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderResponse:
    return folder_service.create(
        db,
        user=current_user,
        name=payload.name,
        parent_id=payload.parent_id,
        is_public=payload.is_public,
    )


@router.put("/{folder_id}", response_model=FolderResponse)
def update_folder(
    folder_id: int,
    payload: FolderUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FolderResponse:
    extra = {}
    # 只有显式提交 parent_id 时才视为移动
    if "parent_id" in payload.model_fields_set:
        extra["parent_id"] = payload.parent_id
    return folder_service.update(
        db,
        user=current_user,
        folder_id=folder_id,
        name=payload.name,
        is_public=payload.is_public,
        **extra,
    )


@router.delete("/{folder_id}", response_model=DictResponse)
def delete_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DictResponse:
    return folder_service.delete(db, user=current_user, folder_id=folder_id)


@router.post("/{folder_id}/share", response_model=DictResponse)
def share_folder(
    folder_id: int,
    payload: ShareRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DictResponse:
    return folder_service.share(
        db,
        user=current_user,
        folder_id=folder_id,
        user_ids=payload.user_ids,
        access_level=payload.access_level,
    )
