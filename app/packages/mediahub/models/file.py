"""文件模型：记录上传文件的元数据与物理位置。"""

from typing import List, Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.models.base import Base, TimestampMixin


class MediaFile(TimestampMixin, Base):
    """上传文件实体，``folder_id`` 为空表示位于根目录。"""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    original_name: Mapped[str] = mapped_column(String(255))
    filename: Mapped[str] = mapped_column(String(255), index=True)
    mime_type: Mapped[str] = mapped_column(String(255), default="application/octet-stream")
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)
    file_path: Mapped[str] = mapped_column(String(1024))
    thumbnail_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    folder_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    uploaded_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    folder: Mapped[Optional["Folder"]] = relationship("Folder", back_populates="files")
    uploader: Mapped["User"] = relationship("User", lazy="joined")
    shares: Mapped[List["FileShare"]] = relationship(
        "FileShare",
        back_populates="file",
        cascade="all, delete-orphan",
    )

    @property
    def is_image(self) -> bool:
        return (self.mime_type or "").lower().startswith("image/")

    @property
    def download_url(self) -> str:
        return f"/api/v1/files/{self.id}/download"

    @property
    def preview_url(self) -> str:
        return f"/api/v1/files/{self.id}/preview"

    @property
    def thumbnail_url(self) -> Optional[str]:
        if not self.thumbnail_path:
            return None
        return f"/api/v1/files/{self.id}/thumbnail"
