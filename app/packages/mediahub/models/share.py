"""共享授权模型：把文件或文件夹授权给其他用户。"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.core.enums import AccessLevelEnum
from app.packages.mediahub.models.base import Base, TimestampMixin


class FileShare(TimestampMixin, Base):
    __tablename__ = "file_shares"
    __table_args__ = (UniqueConstraint("file_id", "shared_with_user_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    file_id: Mapped[int] = mapped_column(Integer, ForeignKey("files.id", ondelete="CASCADE"), index=True)
    shared_with_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    shared_by_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    access_level: Mapped[str] = mapped_column(String(10), default=AccessLevelEnum.READ.value)

    file: Mapped["MediaFile"] = relationship("MediaFile", back_populates="shares")
    shared_by: Mapped["User"] = relationship("User", foreign_keys=[shared_by_user_id], lazy="joined")


class FolderShare(TimestampMixin, Base):
    __tablename__ = "folder_shares"
    __table_args__ = (UniqueConstraint("folder_id", "shared_with_user_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    folder_id: Mapped[int] = mapped_column(Integer, ForeignKey("folders.id", ondelete="CASCADE"), index=True)
    shared_with_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    shared_by_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    access_level: Mapped[str] = mapped_column(String(10), default=AccessLevelEnum.WRITE.value)

    folder: Mapped["Folder"] = relationship("Folder", back_populates="shares")
    shared_by: Mapped["User"] = relationship("User", foreign_keys=[shared_by_user_id], lazy="joined")
