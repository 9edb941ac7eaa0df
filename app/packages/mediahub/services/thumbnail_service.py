"""缩略图服务：为上传的图片生成固定尺寸的 JPEG 缩略图。"""

from __future__ import annotations

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from app.packages.mediahub.core.constants import THUMBNAIL_PREFIX, THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.services.storage_service import LocalStorage, get_thumbnail_storage

logger = get_logger("thumbnails")


class ThumbnailService:
    MAX_ORIG_BYTES = 20 * 1024 * 1024  # 20MB 安全上限

    def thumbnail_name(self, stored_filename: str) -> str:
        return f"{THUMBNAIL_PREFIX}{stored_filename}"

    def create(self, data: bytes, stored_filename: str, *, storage: Optional[LocalStorage] = None) -> Optional[str]:
        """生成缩略图并返回相对路径；图片无法解析时记录警告并返回 ``None``。"""
        if len(data) > self.MAX_ORIG_BYTES:
            logger.warning("Skip thumbnail for %s: original too large", stored_filename)
            return None
        try:
            thumb_bytes = self.render(data)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            logger.warning("Thumbnail generation failed for %s: %s", stored_filename, exc)
            return None
        storage = storage or get_thumbnail_storage()
        return storage.save("", self.thumbnail_name(stored_filename), thumb_bytes)

    def render(self, data: bytes) -> bytes:
        """等比缩放到 200x200 以内，输出质量 80 的 JPEG。"""
        with Image.open(io.BytesIO(data)) as image:
            image.thumbnail(THUMBNAIL_SIZE)
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=THUMBNAIL_QUALITY)
        return buffer.getvalue()


thumbnail_service = ThumbnailService()
