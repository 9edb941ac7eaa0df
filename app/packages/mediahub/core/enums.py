"""枚举定义：约束状态字段与访问级别的可选值。"""

from enum import Enum


class RoleStatusEnum(str, Enum):
    NORMAL = "normal"
    DISABLED = "disabled"


class AccessLevelEnum(str, Enum):
    """共享授权的访问级别。"""

    READ = "read"
    WRITE = "write"


class FolderAccessTypeEnum(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"
    SHARED = "shared"


class PublicationStatusEnum(str, Enum):
    """发布内容的审核状态。"""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# 审核状态允许的流转；服务端校验与前端向导共用
PUBLICATION_TRANSITIONS: dict[str, set[str]] = {
    PublicationStatusEnum.DRAFT.value: {PublicationStatusEnum.PENDING.value},
    PublicationStatusEnum.PENDING.value: {PublicationStatusEnum.APPROVED.value, PublicationStatusEnum.REJECTED.value},
    PublicationStatusEnum.REJECTED.value: {PublicationStatusEnum.PENDING.value},
    PublicationStatusEnum.APPROVED.value: {PublicationStatusEnum.REJECTED.value},
}


class ViewModeEnum(str, Enum):
    GRID = "grid"
    LIST = "list"


class SelectionModeEnum(str, Enum):
    """文件管理器的展示模式：管理模式或选择器模式。"""

    MANAGER = "manager"
    PICKER = "picker"
