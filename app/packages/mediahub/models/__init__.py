"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from app.packages.mediahub.models.category import Category, Subcategory
from app.packages.mediahub.models.file import MediaFile
from app.packages.mediahub.models.folder import Folder
from app.packages.mediahub.models.nav_link import NavLink
from app.packages.mediahub.models.publication import Publication, PublicationAttachment
from app.packages.mediahub.models.role import Permission, Role
from app.packages.mediahub.models.share import FileShare, FolderShare
from app.packages.mediahub.models.user import User

__all__ = [
    "Category",
    "Subcategory",
    "MediaFile",
    "Folder",
    "NavLink",
    "Publication",
    "PublicationAttachment",
    "Permission",
    "Role",
    "FileShare",
    "FolderShare",
    "User",
]
