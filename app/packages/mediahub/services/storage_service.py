"""本地磁盘存储：上传文件与缩略图的物理读写。

所有路径均为相对上传根目录的相对路径，拼接时做越权校验，防止 ``..`` 路径遍历。
"""

from __future__ import annotations

import mimetypes
import shutil
from pathlib import Path
from typing import Optional

from fastapi import status
from fastapi.responses import FileResponse

from app.packages.mediahub.core.config import get_settings
from app.packages.mediahub.core.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_NOT_FOUND
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.logger import get_logger

logger = get_logger("storage")


def guess_mime(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or "application/octet-stream"


class LocalStorage:
    """以某个根目录为边界的本地文件存储。"""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - 极端情况下可能失败
            raise AppException(f"无法创建存储根目录: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    # 统一的安全路径拼接，防止路径遍历
    def resolve(self, rel: str) -> Path:
        rel_norm = (rel or "").strip().lstrip("/")
        candidate = (self.root / rel_norm).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError as exc:
            raise AppException("非法路径: 越权访问", HTTP_STATUS_BAD_REQUEST) from exc
        return candidate

    def ensure_dir(self, rel: str) -> Path:
        target = self.resolve(rel)
        target.mkdir(parents=True, exist_ok=True)
        return target

    def remove_dir(self, rel: str) -> None:
        """删除空目录；目录不存在时忽略。"""
        target = self.resolve(rel)
        if target == self.root or not target.exists():
            return
        try:
            target.rmdir()
        except OSError:
            logger.warning("Directory %s is not empty, removing recursively", target)
            shutil.rmtree(target, ignore_errors=True)

    def save(self, rel_dir: str, filename: str, content: bytes) -> str:
        """写入文件并返回其相对路径。"""
        directory = self.ensure_dir(rel_dir)
        target = directory / Path(filename).name
        with open(target, "wb") as f:
            f.write(content)
        return target.relative_to(self.root).as_posix()

    def move(self, rel_path: str, rel_dir: str) -> str:
        source = self.resolve(rel_path)
        directory = self.ensure_dir(rel_dir)
        target = directory / source.name
        if source.exists() and source != target:
            shutil.move(str(source), str(target))
        return target.relative_to(self.root).as_posix()

    def delete(self, rel_path: Optional[str]) -> bool:
        if not rel_path:
            return False
        target = self.resolve(rel_path)
        if not target.is_file():
            return False
        try:
            target.unlink()
        except OSError as exc:
            logger.warning("Failed to remove %s: %s", target, exc)
            return False
        return True

    def existing(self, rel_path: str) -> Path:
        target = self.resolve(rel_path)
        if not target.exists() or not target.is_file():
            raise AppException("文件不存在", HTTP_STATUS_NOT_FOUND)
        return target

    def file_response(
        self,
        rel_path: str,
        *,
        media_type: Optional[str] = None,
        filename: Optional[str] = None,
        inline: bool = False,
    ) -> FileResponse:
        target = self.existing(rel_path)
        return FileResponse(
            str(target),
            media_type=media_type or guess_mime(target.name),
            filename=filename or target.name,
            content_disposition_type="inline" if inline else "attachment",
        )


def get_upload_storage() -> LocalStorage:
    return LocalStorage(get_settings().upload_directory)


def get_thumbnail_storage() -> LocalStorage:
    return LocalStorage(get_settings().thumbnail_directory)
