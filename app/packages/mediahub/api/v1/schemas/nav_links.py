"""导航链接的请求与响应模型。"""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope


class NavLinkCreateRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    url: Optional[str] = Field(default=None, max_length=1024, description="外部链接")
    route: Optional[str] = Field(default=None, max_length=255, description="站内路由")
    display_order: int = 0
    is_active: bool = True


class NavLinkUpdateRequest(BaseModel):
    label: Optional[str] = Field(default=None, max_length=100)
    url: Optional[str] = Field(default=None, max_length=1024)
    route: Optional[str] = Field(default=None, max_length=255)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class NavLinkItem(BaseModel):
    id: int
    label: str
    url: Optional[str] = None
    route: Optional[str] = None
    external: bool
    display_order: int
    is_active: bool
    create_time: Optional[str] = None
    update_time: Optional[str] = None


NavLinkResponse = ResponseEnvelope[NavLinkItem]
NavLinkListResponse = ResponseEnvelope[List[NavLinkItem]]
