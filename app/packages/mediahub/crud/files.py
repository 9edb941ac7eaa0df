"""文件 CRUD：访问范围过滤、搜索与批量查询。"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.crud.folders import owned_folder_ids
from app.packages.mediahub.models.file import MediaFile
from app.packages.mediahub.models.folder import Folder
from app.packages.mediahub.models.share import FileShare, FolderShare

_UNSET = object()


def file_access_clause(user_id: int):
    """当前用户可访问的文件：本人上传、位于本人或公开文件夹、文件或所在文件夹被共享给本人。"""
    public_folders = select(Folder.id).where(Folder.is_public.is_(True))
    shared_files = select(FileShare.file_id).where(FileShare.shared_with_user_id == user_id)
    shared_folders = select(FolderShare.folder_id).where(FolderShare.shared_with_user_id == user_id)
    return or_(
        MediaFile.uploaded_by == user_id,
        MediaFile.folder_id.in_(owned_folder_ids(user_id)),
        MediaFile.folder_id.in_(public_folders),
        MediaFile.id.in_(shared_files),
        MediaFile.folder_id.in_(shared_folders),
    )


class CRUDFile(CRUDBase[MediaFile]):
    def list_accessible(
        self,
        db: Session,
        *,
        user_id: int,
        folder_id=_UNSET,
        search: Optional[str] = None,
        mime_type: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[list[MediaFile], int]:
        """按访问范围查询文件；``folder_id`` 传 ``None`` 表示根目录，不传表示全部目录。"""
        query = self.query(db).filter(file_access_clause(user_id))
        if folder_id is None:
            query = query.filter(MediaFile.folder_id.is_(None))
        elif folder_id is not _UNSET:
            query = query.filter(MediaFile.folder_id == folder_id)
        if search:
            query = query.filter(MediaFile.original_name.ilike(f"%{search.strip()}%"))
        if mime_type:
            normalized = mime_type.strip().lower()
            if normalized.endswith("/*"):
                query = query.filter(MediaFile.mime_type.ilike(f"{normalized[:-1]}%"))
            else:
                query = query.filter(MediaFile.mime_type == normalized)
        total = query.count()
        query = query.order_by(MediaFile.create_time.desc(), MediaFile.id.desc()).offset(max(skip, 0))
        if limit is not None:
            query = query.limit(max(limit, 1))
        return query.all(), total

    def has_files(self, db: Session, folder_id: int) -> bool:
        return self.query(db).filter(MediaFile.folder_id == folder_id).first() is not None

    def list_shared_with(self, db: Session, user_id: int) -> list[tuple[MediaFile, FileShare]]:
        return (
            db.query(MediaFile, FileShare)
            .join(FileShare, FileShare.file_id == MediaFile.id)
            .filter(FileShare.shared_with_user_id == user_id)
            .order_by(FileShare.create_time.desc())
            .all()
        )


file_crud = CRUDFile(MediaFile)
