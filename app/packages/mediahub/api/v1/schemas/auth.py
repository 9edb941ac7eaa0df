"""认证相关的请求与响应模型。"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="用户名")
    password: str = Field(..., min_length=1, description="密码")

    @model_validator(mode="after")
    def _trim_username(self) -> "LoginRequest":
        self.username = self.username.strip()
        return self


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="用户名")
    password: str = Field(..., min_length=6, description="密码")
    email: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def _normalize(self) -> "RegisterRequest":
        self.username = self.username.strip()
        if len(self.username) < 3:
            raise ValueError("用户名至少 3 个字符")
        if self.email is not None:
            self.email = self.email.strip() or None
            if self.email and "@" not in self.email:
                raise ValueError("邮箱格式不正确")
        return self


class ProfileUpdateRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=100)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=6)

    @model_validator(mode="after")
    def _check_email(self) -> "ProfileUpdateRequest":
        if self.email and "@" not in self.email:
            raise ValueError("邮箱格式不正确")
        return self


class UserProfile(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_active: bool
    roles: List[str]
    permissions: List[str]
    is_admin: bool
    last_login_at: Optional[str] = None
    create_time: Optional[str] = None


class TokenData(BaseModel):
    access_token: str
    token_type: str
    user: UserProfile


TokenResponse = ResponseEnvelope[TokenData]
ProfileResponse = ResponseEnvelope[UserProfile]
