"""MediaHub 前端状态层：通过 REST API 驱动文件管理器与发布向导。"""

from .api_client import ApiError, MediaHubClient
from .file_manager import FileManagerView, Notification
from .folder_tree import FolderTreeStore
from .publication_wizard import PublicationWizard, WizardStep
from .selection import FileSelection

__all__ = [
    "ApiError",
    "MediaHubClient",
    "FileManagerView",
    "Notification",
    "FolderTreeStore",
    "PublicationWizard",
    "WizardStep",
    "FileSelection",
]
