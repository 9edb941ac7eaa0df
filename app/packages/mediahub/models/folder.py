"""文件夹模型：以 ``parent_id`` 自引用构成目录树。"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.core.enums import FolderAccessTypeEnum
from app.packages.mediahub.models.base import Base, TimestampMixin


class Folder(TimestampMixin, Base):
    """文件夹实体。``path`` 为相对上传根目录的物理路径。"""

    __tablename__ = "folders"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("folders.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    path: Mapped[str] = mapped_column(String(1024), default="")
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    access_type: Mapped[str] = mapped_column(String(20), default=FolderAccessTypeEnum.PRIVATE.value)
    created_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    parent: Mapped[Optional["Folder"]] = relationship("Folder", remote_side="Folder.id", back_populates="children")
    children: Mapped[List["Folder"]] = relationship("Folder", back_populates="parent")
    files: Mapped[List["MediaFile"]] = relationship("MediaFile", back_populates="folder")
    creator: Mapped["User"] = relationship("User", lazy="joined")
    shares: Mapped[List["FolderShare"]] = relationship(
        "FolderShare",
        back_populates="folder",
        cascade="all, delete-orphan",
    )
