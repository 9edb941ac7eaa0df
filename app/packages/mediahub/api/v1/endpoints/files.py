"""文件路由：上传、列表、搜索、下载预览、重命名、移动、删除与共享。"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.packages.mediahub.api.v1.schemas import files as schemas
from app.packages.mediahub.api.v1.schemas.common import DictResponse, ShareRequest
from app.packages.mediahub.core.dependencies import get_current_active_user, get_db
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.file_service import file_service

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/upload", response_model=schemas.FileListResponse)
def upload_files(
    files: List[UploadFile] = File(..., description="待上传文件，可多选"),
    folder_id: Optional[int] = Form(None, description="目标文件夹，为空表示根目录"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FileListResponse:
    return file_service.upload(db, user=current_user, uploads=files, folder_id=folder_id)


@router.get("", response_model=schemas.FilesPageResponse)
def list_files(
    folder_id: Optional[int] = Query(None, alias="folderId", description="为空表示根目录"),
    search: Optional[str] = Query(None),
    mime_type: Optional[str] = Query(None, alias="mimeType", description="支持 image/* 通配"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500, alias="pageSize"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FilesPageResponse:
    return file_service.list_files(
        db,
        user=current_user,
        folder_id=folder_id,
        search=search,
        mime_type=mime_type,
        page=page,
        page_size=page_size,
    )


@router.get("/search", response_model=schemas.FilesPageResponse)
def search_files(
    q: str = Query(..., description="文件名关键字"),
    mime_type: Optional[str] = Query(None, alias="mimeType"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FilesPageResponse:
    return file_service.search(db, user=current_user, query=q, mime_type=mime_type)


@router.get("/shared-with-me", response_model=schemas.FileListResponse)
def shared_with_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FileListResponse:
    return file_service.shared_with_me(db, user=current_user)


@router.post("/move", response_model=DictResponse)
def move_files(
    payload: schemas.MoveBody,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DictResponse:
    return file_service.move(db, user=current_user, file_ids=payload.file_ids, folder_id=payload.folder_id)


@router.get("/{file_id}", response_model=schemas.FileResponse)
def get_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FileResponse:
    return file_service.get_detail(db, user=current_user, file_id=file_id)


@router.get("/{file_id}/download")
def download_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FileResponse:
    return file_service.download(db, user=current_user, file_id=file_id)


@router.get("/{file_id}/preview")
def preview_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FileResponse:
    return file_service.preview(db, user=current_user, file_id=file_id)


@router.get("/{file_id}/thumbnail")
def file_thumbnail(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FileResponse:
    return file_service.thumbnail(db, user=current_user, file_id=file_id)


@router.put("/{file_id}/rename", response_model=schemas.FileResponse)
def rename_file(
    file_id: int,
    payload: schemas.RenameBody,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> schemas.FileResponse:
    return file_service.rename(db, user=current_user, file_id=file_id, name=payload.name)


@router.delete("/{file_id}", response_model=DictResponse)
def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DictResponse:
    return file_service.delete(db, user=current_user, file_id=file_id)


@router.post("/{file_id}/share", response_model=DictResponse)
def share_file(
    file_id: int,
    payload: ShareRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DictResponse:
    return file_service.share(
        db,
        user=current_user,
        file_id=file_id,
        user_ids=payload.user_ids,
        access_level=payload.access_level,
    )
