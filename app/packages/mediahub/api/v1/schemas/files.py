"""文件接口的请求与响应模型。"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope


class RenameBody(BaseModel):
    name: str = Field(..., description="新的文件名，缺少扩展名时沿用原扩展名")


class MoveBody(BaseModel):
    file_ids: List[int] = Field(default_factory=list)
    folder_id: Optional[int] = Field(default=None, description="目标文件夹，为空表示根目录")


class FileItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    original_name: str
    filename: str
    mime_type: str
    file_size: int
    folder_id: Optional[int] = None
    is_image: bool
    download_url: str
    thumbnail_url: Optional[str] = None


FileResponse = ResponseEnvelope[FileItem]
FileListResponse = ResponseEnvelope[List[FileItem]]
FilesPageResponse = ResponseEnvelope[Dict[str, Any]]
FilesMutationResponse = ResponseEnvelope[Any]
