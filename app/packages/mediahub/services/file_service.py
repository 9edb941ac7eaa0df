"""文件服务：上传、访问控制、重命名、移动、共享与删除。"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Iterable, Optional, Sequence

from fastapi import UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.packages.mediahub.core.cache import get_cache
from app.packages.mediahub.core.config import get_settings
from app.packages.mediahub.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
    HTTP_STATUS_PAYLOAD_TOO_LARGE,
    HTTP_STATUS_UNSUPPORTED_MEDIA_TYPE,
    MAX_NAME_LENGTH,
)
from app.packages.mediahub.core.enums import AccessLevelEnum
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.guards import ensure_owner_or_admin, is_admin_user
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.mime import mime_allowed
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.crud.files import file_crud
from app.packages.mediahub.crud.folders import folder_crud
from app.packages.mediahub.crud.publications import publication_crud
from app.packages.mediahub.crud.shares import file_share_crud, folder_share_crud
from app.packages.mediahub.models.file import MediaFile
from app.packages.mediahub.models.folder import Folder
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.folder_service import (
    folder_service,
    invalidate_file_manager_cache,
    normalize_access_level,
    normalize_share_targets,
)
from app.packages.mediahub.services.serializers import serialize_file, user_brief
from app.packages.mediahub.services.storage_service import get_thumbnail_storage, get_upload_storage, guess_mime
from app.packages.mediahub.services.thumbnail_service import thumbnail_service

logger = get_logger("files")


def sanitize_file_name(name: Optional[str], *, original_name: str) -> str:
    """清理重命名输入：去掉换行与首尾空白，缺少扩展名时沿用原扩展名。"""
    cleaned = (name or "").replace("\r", "").replace("\n", "").strip()
    if not cleaned:
        raise AppException("文件名不能为空", HTTP_STATUS_BAD_REQUEST)
    if not Path(cleaned).suffix:
        cleaned = f"{cleaned}{Path(original_name).suffix}"
    if len(cleaned) > MAX_NAME_LENGTH:
        raise AppException(f"文件名不能超过 {MAX_NAME_LENGTH} 个字符", HTTP_STATUS_BAD_REQUEST)
    return cleaned


class FileService:
    """聚合文件管理相关的业务能力。"""

    # ------------------------------------------------------------------
    # 上传
    # ------------------------------------------------------------------

    def upload(
        self,
        db: Session,
        *,
        user: User,
        uploads: Sequence[UploadFile],
        folder_id: Optional[int] = None,
    ) -> dict:
        if not uploads:
            raise AppException("请选择要上传的文件", HTTP_STATUS_BAD_REQUEST)
        folder = None
        if folder_id is not None:
            folder = folder_service.get_writable(db, user=user, folder_id=folder_id)

        # 先整体校验，避免部分文件写盘后才发现非法
        prepared = [self._prepare_upload(item) for item in uploads]

        storage = get_upload_storage()
        rel_dir = folder.path if folder is not None else ""
        created: list[MediaFile] = []
        written_files: list[str] = []
        written_thumbnails: list[str] = []
        try:
            for original_name, mime_type, content in prepared:
                stored_name = f"{uuid.uuid4().hex}{Path(original_name).suffix.lower()}"
                file_path = storage.save(rel_dir, stored_name, content)
                written_files.append(file_path)
                thumbnail_path = None
                if mime_type.startswith("image/"):
                    thumbnail_path = thumbnail_service.create(content, stored_name)
                    if thumbnail_path:
                        written_thumbnails.append(thumbnail_path)
                record = MediaFile(
                    original_name=original_name,
                    filename=stored_name,
                    mime_type=mime_type,
                    file_size=len(content),
                    file_path=file_path,
                    thumbnail_path=thumbnail_path,
                    folder_id=folder.id if folder is not None else None,
                    uploaded_by=user.id,
                )
                db.add(record)
                created.append(record)
            db.commit()
        except Exception:
            db.rollback()
            self._discard_stored(written_files, written_thumbnails)
            logger.exception(
                "Upload by user %s failed, removed %s stored file(s)", user.id, len(written_files)
            )
            raise
        for record in created:
            db.refresh(record)

        logger.info("User %s uploaded %s file(s) into folder %s", user.id, len(created), folder_id)
        invalidate_file_manager_cache()
        data = [serialize_file(record) for record in created]
        return create_response("文件上传成功", data, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def list_files(
        self,
        db: Session,
        *,
        user: User,
        folder_id: Optional[int] = None,
        search: Optional[str] = None,
        mime_type: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> dict:
        page = max(page, 1)
        page_size = max(page_size, 1)
        cache = get_cache()
        cacheable = not search and not mime_type
        key = cache.build_key(
            "files",
            f"{folder_id if folder_id is not None else 'root'}:{page}:{page_size}",
            user_id=user.id,
        )
        if cacheable:
            cached = cache.get(key)
            if cached is not None:
                return create_response("获取文件列表成功", cached, HTTP_STATUS_OK)

        if folder_id is not None:
            folder = folder_crud.get(db, folder_id)
            if folder is None:
                raise AppException("文件夹不存在", HTTP_STATUS_NOT_FOUND)
            if not folder_service.can_read(db, user=user, folder=folder):
                raise AppException("无权访问该文件夹", HTTP_STATUS_FORBIDDEN)

        items, total = file_crud.list_accessible(
            db,
            user_id=user.id,
            folder_id=folder_id,
            search=search,
            mime_type=mime_type,
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        payload = {
            "total": total,
            "items": [serialize_file(item) for item in items],
            "page": page,
            "page_size": page_size,
        }
        if cacheable:
            cache.set(key, payload, entity="files")
        return create_response("获取文件列表成功", payload, HTTP_STATUS_OK)

    def search(self, db: Session, *, user: User, query: str, mime_type: Optional[str] = None, limit: int = 100) -> dict:
        keyword = (query or "").strip()
        if not keyword:
            raise AppException("搜索关键字不能为空", HTTP_STATUS_BAD_REQUEST)
        items, total = file_crud.list_accessible(
            db, user_id=user.id, search=keyword, mime_type=mime_type, limit=limit
        )
        payload = {"total": total, "items": [serialize_file(item) for item in items]}
        return create_response("搜索文件成功", payload, HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, user: User, file_id: int) -> dict:
        record = self.get_accessible(db, user=user, file_id=file_id)
        return create_response("获取文件详情成功", serialize_file(record), HTTP_STATUS_OK)

    def shared_with_me(self, db: Session, *, user: User) -> dict:
        data = [
            serialize_file(
                record,
                extra={"shared_by": user_brief(share.shared_by), "access_level": share.access_level},
            )
            for record, share in file_crud.list_shared_with(db, user.id)
        ]
        return create_response("获取共享文件成功", data, HTTP_STATUS_OK)

    def download(self, db: Session, *, user: User, file_id: int) -> FileResponse:
        record = self.get_accessible(db, user=user, file_id=file_id)
        return get_upload_storage().file_response(
            record.file_path, media_type=record.mime_type, filename=record.original_name
        )

    def preview(self, db: Session, *, user: User, file_id: int) -> FileResponse:
        record = self.get_accessible(db, user=user, file_id=file_id)
        return get_upload_storage().file_response(
            record.file_path, media_type=record.mime_type, filename=record.original_name, inline=True
        )

    def thumbnail(self, db: Session, *, user: User, file_id: int) -> FileResponse:
        record = self.get_accessible(db, user=user, file_id=file_id)
        if not record.thumbnail_path:
            raise AppException("该文件没有缩略图", HTTP_STATUS_NOT_FOUND)
        return get_thumbnail_storage().file_response(record.thumbnail_path, media_type="image/jpeg", inline=True)

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def rename(self, db: Session, *, user: User, file_id: int, name: str) -> dict:
        record = self._get_or_404(db, file_id)
        if record.uploaded_by != user.id:
            raise AppException("只能重命名自己上传的文件", HTTP_STATUS_FORBIDDEN)
        record.original_name = sanitize_file_name(name, original_name=record.original_name)
        db.add(record)
        db.commit()
        db.refresh(record)
        invalidate_file_manager_cache()
        return create_response("重命名成功", serialize_file(record), HTTP_STATUS_OK)

    def move(self, db: Session, *, user: User, file_ids: Iterable[int], folder_id: Optional[int]) -> dict:
        requested = list(dict.fromkeys(item for item in (file_ids or []) if item is not None))
        if not requested:
            raise AppException("请选择要移动的文件", HTTP_STATUS_BAD_REQUEST)
        destination: Optional[Folder] = None
        if folder_id is not None:
            destination = folder_service.get_writable(db, user=user, folder_id=folder_id)

        records = file_crud.list_by_ids(db, requested)
        missing = set(requested) - {record.id for record in records}
        if missing:
            raise AppException(
                f"部分文件不存在：{', '.join(str(item) for item in sorted(missing))}",
                HTTP_STATUS_NOT_FOUND,
            )
        admin = is_admin_user(user)
        for record in records:
            if record.uploaded_by != user.id and not admin:
                raise AppException("只能移动自己上传的文件", HTTP_STATUS_FORBIDDEN)

        storage = get_upload_storage()
        rel_dir = destination.path if destination is not None else ""
        moved = 0
        for record in records:
            if record.folder_id == (destination.id if destination else None):
                continue
            record.file_path = storage.move(record.file_path, rel_dir)
            record.folder_id = destination.id if destination else None
            db.add(record)
            moved += 1
        db.commit()
        logger.info("User %s moved %s file(s) to folder %s", user.id, moved, folder_id)
        invalidate_file_manager_cache()
        return create_response("移动文件成功", {"moved": moved}, HTTP_STATUS_OK)

    def delete(self, db: Session, *, user: User, file_id: int) -> dict:
        record = self._get_or_404(db, file_id)
        ensure_owner_or_admin(
            user,
            record.uploaded_by,
            message="只能删除自己上传的文件",
            container_owner_id=record.folder.created_by if record.folder is not None else None,
        )

        file_path, thumbnail_path = record.file_path, record.thumbnail_path
        publication_crud.delete_attachments_for_file(db, record.id)
        file_crud.hard_delete(db, record)
        get_upload_storage().delete(file_path)
        get_thumbnail_storage().delete(thumbnail_path)

        logger.info("File %s deleted by user %s", file_id, user.id)
        invalidate_file_manager_cache()
        get_cache().invalidate("public-posts")
        return create_response("删除文件成功", {"id": file_id}, HTTP_STATUS_OK)

    def share(
        self,
        db: Session,
        *,
        user: User,
        file_id: int,
        user_ids: Iterable[int],
        access_level: Optional[str] = None,
    ) -> dict:
        record = self._get_or_404(db, file_id)
        ensure_owner_or_admin(user, record.uploaded_by, message="只能共享自己上传的文件")
        level = normalize_access_level(access_level, AccessLevelEnum.READ)
        targets = normalize_share_targets(db, user_ids, owner_id=record.uploaded_by)
        file_share_crud.upsert_many(
            db,
            file_id=record.id,
            user_ids=[target.id for target in targets],
            shared_by=user.id,
            access_level=level,
        )
        db.commit()
        logger.info("File %s shared with %s users (%s)", record.id, len(targets), level)
        invalidate_file_manager_cache()
        data = {
            "file_id": record.id,
            "shared_with": [
                {"user_id": target.id, "username": target.username, "access_level": level} for target in targets
            ],
        }
        return create_response("共享文件成功", data, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 访问控制
    # ------------------------------------------------------------------

    def can_access(self, db: Session, *, user: User, record: MediaFile) -> bool:
        """上传者、管理员、所在文件夹的所有者、公开文件夹、文件共享或所在文件夹共享均可访问。"""
        if record.uploaded_by == user.id or is_admin_user(user):
            return True
        if record.folder is not None and (record.folder.is_public or record.folder.created_by == user.id):
            return True
        if file_share_crud.get_grant(db, file_id=record.id, user_id=user.id) is not None:
            return True
        if record.folder_id is not None:
            return folder_share_crud.get_grant(db, folder_id=record.folder_id, user_id=user.id) is not None
        return False

    def get_accessible(self, db: Session, *, user: User, file_id: int) -> MediaFile:
        record = self._get_or_404(db, file_id)
        if not self.can_access(db, user=user, record=record):
            raise AppException("无权访问该文件", HTTP_STATUS_FORBIDDEN)
        return record

    # ------------------------------------------------------------------
    # 内部辅助方法
    # ------------------------------------------------------------------

    def _get_or_404(self, db: Session, file_id: int) -> MediaFile:
        record = file_crud.get(db, file_id)
        if record is None:
            raise AppException("文件不存在", HTTP_STATUS_NOT_FOUND)
        return record

    def _prepare_upload(self, upload: UploadFile) -> tuple[str, str, bytes]:
        settings = get_settings()
        original_name = Path(upload.filename or "").name.strip()
        if not original_name:
            raise AppException("文件名不能为空", HTTP_STATUS_BAD_REQUEST)
        content = upload.file.read()
        if len(content) > settings.max_file_size:
            raise AppException(
                f"文件 {original_name} 超过大小限制（{settings.max_file_size} 字节）",
                HTTP_STATUS_PAYLOAD_TOO_LARGE,
            )
        mime_type = (upload.content_type or "").split(";")[0].strip().lower()
        if not mime_type or mime_type == "application/octet-stream":
            mime_type = guess_mime(original_name)
        if not mime_allowed(mime_type, settings.allowed_mime_types):
            raise AppException(f"不支持的文件类型：{mime_type}", HTTP_STATUS_UNSUPPORTED_MEDIA_TYPE)
        return original_name, mime_type, content

    @staticmethod
    def _discard_stored(file_paths: Iterable[str], thumbnail_paths: Iterable[str]) -> None:
        """上传未能入库时清理已写盘的原文件与缩略图。"""
        uploads = get_upload_storage()
        for path in file_paths:
            uploads.delete(path)
        thumbnails = get_thumbnail_storage()
        for path in thumbnail_paths:
            thumbnails.delete(path)


file_service = FileService()
