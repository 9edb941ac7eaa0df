"""文件夹接口的请求与响应模型。"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope


class FolderCreateRequest(BaseModel):
    name: str = Field(..., description="文件夹名称")
    parent_id: Optional[int] = Field(default=None, description="父文件夹 ID，为空表示根目录")
    is_public: bool = False


class FolderUpdateRequest(BaseModel):
    """``parent_id`` 显式传入 ``null`` 表示移动到根目录，未传入则保持不变。"""

    name: Optional[str] = None
    is_public: Optional[bool] = None
    parent_id: Optional[int] = None


class FolderItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    parent_id: Optional[int] = None
    is_public: bool
    access_type: str
    created_by: Optional[Dict[str, Any]] = None


FolderResponse = ResponseEnvelope[FolderItem]
FolderListResponse = ResponseEnvelope[List[FolderItem]]
FolderTreeResponse = ResponseEnvelope[Dict[str, Any]]
