"""共享授权 CRUD：批量授予（存在则更新访问级别）与查询。"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.share import FileShare, FolderShare


class CRUDFileShare(CRUDBase[FileShare]):
    def get_grant(self, db: Session, *, file_id: int, user_id: int) -> Optional[FileShare]:
        return (
            self.query(db)
            .filter(FileShare.file_id == file_id, FileShare.shared_with_user_id == user_id)
            .first()
        )

    def upsert_many(
        self,
        db: Session,
        *,
        file_id: int,
        user_ids: Iterable[int],
        shared_by: int,
        access_level: str,
    ) -> list[FileShare]:
        grants: list[FileShare] = []
        for user_id in user_ids:
            grant = self.get_grant(db, file_id=file_id, user_id=user_id)
            if grant is None:
                grant = FileShare(
                    file_id=file_id,
                    shared_with_user_id=user_id,
                    shared_by_user_id=shared_by,
                    access_level=access_level,
                )
            else:
                grant.access_level = access_level
                grant.shared_by_user_id = shared_by
            db.add(grant)
            grants.append(grant)
        return grants


class CRUDFolderShare(CRUDBase[FolderShare]):
    def get_grant(self, db: Session, *, folder_id: int, user_id: int) -> Optional[FolderShare]:
        return (
            self.query(db)
            .filter(FolderShare.folder_id == folder_id, FolderShare.shared_with_user_id == user_id)
            .first()
        )

    def upsert_many(
        self,
        db: Session,
        *,
        folder_id: int,
        user_ids: Iterable[int],
        shared_by: int,
        access_level: str,
    ) -> list[FolderShare]:
        grants: list[FolderShare] = []
        for user_id in user_ids:
            grant = self.get_grant(db, folder_id=folder_id, user_id=user_id)
            if grant is None:
                grant = FolderShare(
                    folder_id=folder_id,
                    shared_with_user_id=user_id,
                    shared_by_user_id=shared_by,
                    access_level=access_level,
                )
            else:
                grant.access_level = access_level
                grant.shared_by_user_id = shared_by
            db.add(grant)
            grants.append(grant)
        return grants


file_share_crud = CRUDFileShare(FileShare)
folder_share_crud = CRUDFolderShare(FolderShare)
