"""发布内容的请求模型。"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class PublicationBase(BaseModel):
    description: Optional[str] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = Field(default=None, max_length=500)
    cover_image: Optional[str] = None
    youtube_url: Optional[str] = None
    publication_date: Optional[datetime] = None
    has_comments: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_leaderboard: Optional[bool] = None
    status: Optional[str] = Field(default=None, description="draft / pending")
    subcategory_ids: Optional[List[int]] = None
    author_ids: Optional[List[int]] = None
    attachment_ids: Optional[List[int]] = Field(default=None, description="附件文件 ID，按顺序展示")


class PublicationCreateRequest(PublicationBase):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255)
    category_id: int

    @model_validator(mode="after")
    def _trim(self) -> "PublicationCreateRequest":
        self.title = self.title.strip()
        self.slug = self.slug.strip()
        if not self.title:
            raise ValueError("标题不能为空")
        if not self.slug:
            raise ValueError("别名不能为空")
        return self


class PublicationUpdateRequest(PublicationBase):
    title: Optional[str] = Field(default=None, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    category_id: Optional[int] = None


class ApproveRequest(BaseModel):
    publication_date: Optional[datetime] = None


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(default=None, description="拒绝原因，必填")
