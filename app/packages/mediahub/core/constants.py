"""常量定义：HTTP 状态码、内置角色/权限以及默认账号等。"""

HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_PAYLOAD_TOO_LARGE = 413
HTTP_STATUS_UNSUPPORTED_MEDIA_TYPE = 415

ACCESS_TOKEN_TYPE = "bearer"

ADMIN_ROLE = "admin"
AUTHOR_ROLE = "author"
BUILTIN_ROLES = (ADMIN_ROLE, AUTHOR_ROLE)

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_ADMIN_FULL_NAME = "Administrator"
DEFAULT_ADMIN_EMAIL = "admin@mediahub.local"

PUBLIC_FOLDER_NAME = "Public"

# 权限标识
PERM_USERS_MANAGE = "users:manage"
PERM_ROLES_MANAGE = "roles:manage"
PERM_POSTS_CREATE = "posts:create"
PERM_POSTS_EDIT = "posts:edit"
PERM_POSTS_DELETE = "posts:delete"
PERM_POSTS_APPROVE = "posts:approve"
PERM_CATEGORIES_MANAGE = "categories:manage"
PERM_FILES_MANAGE = "files:manage"
PERM_NAV_LINKS_MANAGE = "nav-links:manage"

DEFAULT_PERMISSIONS = (
    (PERM_USERS_MANAGE, "用户管理"),
    (PERM_ROLES_MANAGE, "角色管理"),
    (PERM_POSTS_CREATE, "创建发布内容"),
    (PERM_POSTS_EDIT, "编辑发布内容"),
    (PERM_POSTS_DELETE, "删除发布内容"),
    (PERM_POSTS_APPROVE, "审核发布内容"),
    (PERM_CATEGORIES_MANAGE, "分类管理"),
    (PERM_FILES_MANAGE, "文件管理"),
    (PERM_NAV_LINKS_MANAGE, "导航链接管理"),
)

AUTHOR_PERMISSIONS = (PERM_POSTS_CREATE, PERM_POSTS_EDIT, PERM_FILES_MANAGE)

DEFAULT_CATEGORIES = ("Videos", "Audios", "Photos", "Infographics", "Documents", "Other")

# 文件夹名称禁止包含的字符
FOLDER_NAME_FORBIDDEN_CHARS = '<>:"/\\|?*'
MAX_NAME_LENGTH = 255

THUMBNAIL_SIZE = (200, 200)
THUMBNAIL_QUALITY = 80
THUMBNAIL_PREFIX = "thumb_"

MAX_PAGE_LIMIT = 100
