"""发布内容模型：带审核状态流转的内容记录及其附件。"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.packages.mediahub.core.enums import PublicationStatusEnum
from app.packages.mediahub.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    active_unique_index,
    publication_authors,
    publication_subcategories,
)


class Publication(TimestampMixin, SoftDeleteMixin, Base):
    """发布内容实体。状态取值见 ``PublicationStatusEnum``。"""

    __tablename__ = "publications"
    __table_args__ = (active_unique_index("publications", "slug"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    youtube_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("categories.id"), index=True)
    creator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    approved_by: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PublicationStatusEnum.PENDING.value, index=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    publication_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    has_comments: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unique_hits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_leaderboard: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    category: Mapped["Category"] = relationship("Category", lazy="joined")
    creator: Mapped["User"] = relationship("User", foreign_keys=[creator_id], lazy="joined")
    approver: Mapped[Optional["User"]] = relationship("User", foreign_keys=[approved_by])
    subcategories: Mapped[List["Subcategory"]] = relationship(
        "Subcategory",
        secondary=publication_subcategories,
        lazy="selectin",
    )
    authors: Mapped[List["User"]] = relationship(
        "User",
        secondary=publication_authors,
        lazy="selectin",
    )
    attachments: Mapped[List["PublicationAttachment"]] = relationship(
        "PublicationAttachment",
        back_populates="publication",
        cascade="all, delete-orphan",
        order_by="PublicationAttachment.display_order",
        lazy="selectin",
    )


class PublicationAttachment(TimestampMixin, Base):
    """发布内容引用的附件文件，``display_order`` 决定展示顺序。"""

    __tablename__ = "publication_attachments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    publication_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("publications.id", ondelete="CASCADE"), index=True
    )
    file_id: Mapped[int] = mapped_column(Integer, ForeignKey("files.id", ondelete="CASCADE"), index=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    publication: Mapped[Publication] = relationship(Publication, back_populates="attachments")
    file: Mapped["MediaFile"] = relationship("MediaFile", lazy="joined")
