"""通用响应封装模型。"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """系统统一的响应外层结构。"""

    msg: str
    data: Optional[T] = None
    code: int
    meta: Optional[Dict[str, Any]] = None


class ShareRequest(BaseModel):
    """文件或文件夹共享的请求体，``access_level`` 缺省时由服务端决定。"""

    user_ids: List[int] = Field(default_factory=list, description="共享目标用户 ID")
    access_level: Optional[str] = Field(default=None, description="read 或 write")

    @model_validator(mode="after")
    def _trim(self) -> "ShareRequest":
        if self.access_level is not None:
            self.access_level = self.access_level.strip().lower() or None
        return self


DictResponse = ResponseEnvelope[Dict[str, Any]]
ListResponse = ResponseEnvelope[List[Dict[str, Any]]]
AnyResponse = ResponseEnvelope[Any]
