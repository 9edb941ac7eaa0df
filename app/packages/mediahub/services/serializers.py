"""共享的序列化辅助：用户摘要、文件与文件夹的响应结构。"""

from __future__ import annotations

from typing import Any, Optional

from app.packages.mediahub.core.timezone import format_datetime
from app.packages.mediahub.models.file import MediaFile
from app.packages.mediahub.models.folder import Folder


def user_brief(user: Optional[object]) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "username": user.username}


def serialize_file(item: MediaFile, *, extra: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    data = {
        "id": item.id,
        "original_name": item.original_name,
        "filename": item.filename,
        "mime_type": item.mime_type,
        "file_size": item.file_size,
        "file_path": item.file_path,
        "folder_id": item.folder_id,
        "is_image": item.is_image,
        "download_url": item.download_url,
        "preview_url": item.preview_url,
        "thumbnail_url": item.thumbnail_url,
        "created_by": user_brief(item.uploader),
        "create_time": format_datetime(item.create_time),
        "update_time": format_datetime(item.update_time),
    }
    if extra:
        data.update(extra)
    return data


def serialize_folder(folder: Folder, *, extra: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    data = {
        "id": folder.id,
        "name": folder.name,
        "parent_id": folder.parent_id,
        "is_public": folder.is_public,
        "access_type": folder.access_type,
        "created_by": user_brief(folder.creator),
        "create_time": format_datetime(folder.create_time),
        "update_time": format_datetime(folder.update_time),
    }
    if extra:
        data.update(extra)
    return data
