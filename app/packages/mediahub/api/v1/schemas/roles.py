"""角色与权限相关的请求与响应模型。"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from app.packages.mediahub.api.v1.schemas.common import ResponseEnvelope
from app.packages.mediahub.core.enums import RoleStatusEnum


def _unique(items: Optional[List[int]]) -> Optional[List[int]]:
    if items is None:
        return None
    return list(dict.fromkeys(items))


class RoleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="角色名称")
    slug: str = Field(..., min_length=1, description="角色标识")
    description: Optional[str] = None
    sort_order: int = Field(default=0, ge=0, description="显示顺序")
    status: str = Field(default=RoleStatusEnum.NORMAL.value, description="角色状态")
    permission_ids: List[int] = Field(default_factory=list, description="权限 ID 集合")

    @model_validator(mode="after")
    def _trim_fields(self) -> "RoleCreateRequest":
        self.name = self.name.strip()
        self.slug = self.slug.strip()
        if not self.name:
            raise ValueError("角色名称不能为空")
        if not self.slug:
            raise ValueError("角色标识不能为空")
        self.permission_ids = _unique(self.permission_ids) or []
        return self


class RoleUpdateRequest(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    status: Optional[str] = None
    permission_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def _dedupe(self) -> "RoleUpdateRequest":
        self.permission_ids = _unique(self.permission_ids)
        return self


class RoleStatusUpdateRequest(BaseModel):
    """变更角色状态的请求体。"""

    status: str = Field(..., description="角色状态")

    @model_validator(mode="after")
    def _trim_status(self) -> "RoleStatusUpdateRequest":
        self.status = self.status.strip()
        if not self.status:
            raise ValueError("角色状态不能为空")
        return self


class RolePermissionsRequest(BaseModel):
    """整体替换角色权限；``permission_ids`` 的类型由服务端校验。"""

    permission_ids: Any = None


class PermissionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)


class PermissionUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)


class PermissionItem(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None


class RoleSummary(BaseModel):
    """角色列表项摘要。"""

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    sort_order: int
    status: str
    status_label: str
    is_builtin: bool
    user_count: int
    create_time: Optional[str] = None


class RoleDetail(RoleSummary):
    permissions: List[PermissionItem] = Field(default_factory=list)
    permission_ids: List[int] = Field(default_factory=list)


RoleListResponse = ResponseEnvelope[List[RoleSummary]]
RoleDetailResponse = ResponseEnvelope[RoleDetail]
PermissionResponse = ResponseEnvelope[PermissionItem]
PermissionListResponse = ResponseEnvelope[List[PermissionItem]]
