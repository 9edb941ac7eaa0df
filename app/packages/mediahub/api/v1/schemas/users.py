"""用户管理相关的请求与响应模型。"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.packages.mediahub.api.v1.schemas.auth import UserProfile
from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    email: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = True
    role_ids: List[int] = Field(default_factory=list, description="角色 ID 集合")

    @model_validator(mode="after")
    def _trim(self) -> "UserCreateRequest":
        self.username = self.username.strip()
        if not self.username:
            raise ValueError("用户名不能为空")
        return self


class UserUpdateRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=100)
    password: Optional[str] = Field(default=None, min_length=6)
    is_active: Optional[bool] = None
    role_ids: Optional[List[int]] = Field(default=None, description="传入时整体替换角色")


class ShareCandidate(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None


UserResponse = ResponseEnvelope[UserProfile]
UserListResponse = ResponseEnvelope[List[UserProfile]]
ShareCandidatesResponse = ResponseEnvelope[List[ShareCandidate]]
