"""文件夹服务：目录树的增删改查、共享以及按用户的可见性控制。"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from app.packages.mediahub.core.cache import get_cache
from app.packages.mediahub.core.constants import (
    FOLDER_NAME_FORBIDDEN_CHARS,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_NOT_FOUND,
    HTTP_STATUS_OK,
    MAX_NAME_LENGTH,
)
from app.packages.mediahub.core.enums import AccessLevelEnum, FolderAccessTypeEnum
from app.packages.mediahub.core.exceptions import AppException
from app.packages.mediahub.core.guards import ensure_owner_or_admin, is_admin_user
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.responses import create_response
from app.packages.mediahub.crud.files import file_crud
from app.packages.mediahub.crud.folders import folder_crud
from app.packages.mediahub.crud.shares import file_share_crud, folder_share_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.models.folder import Folder
from app.packages.mediahub.models.user import User
from app.packages.mediahub.services.serializers import serialize_file, serialize_folder, user_brief
from app.packages.mediahub.services.storage_service import get_upload_storage

logger = get_logger("folders")

_UNSET: Any = object()

# 文件夹、文件列表与目录树缓存在任意写操作后整体失效
FILE_MANAGER_CACHE_ENTITIES = ("folders", "folders-tree", "files")


def invalidate_file_manager_cache() -> None:
    get_cache().invalidate(*FILE_MANAGER_CACHE_ENTITIES)


def normalize_share_targets(db: Session, user_ids: Optional[Iterable[int]], *, owner_id: int) -> list[User]:
    """校验共享目标：不能为空、必须存在；会自动去重并排除所有者本人。"""
    requested: list[int] = []
    seen: set[int] = set()
    for item in user_ids or []:
        if item is None or item in seen:
            continue
        seen.add(item)
        requested.append(int(item))
    if not requested:
        raise AppException("请至少选择一个共享用户", HTTP_STATUS_BAD_REQUEST)
    users = user_crud.list_by_ids(db, requested)
    missing = set(requested) - {user.id for user in users}
    if missing:
        raise AppException(
            f"部分用户不存在：{', '.join(str(item) for item in sorted(missing))}",
            HTTP_STATUS_NOT_FOUND,
        )
    return [user for user in users if user.id != owner_id]


def normalize_access_level(access_level: Optional[str], default: AccessLevelEnum) -> str:
    candidate = (access_level or default.value).strip().lower()
    if candidate not in {item.value for item in AccessLevelEnum}:
        raise AppException("未知的访问级别", HTTP_STATUS_BAD_REQUEST)
    return candidate


class FolderService:
    """聚合文件夹管理相关的业务能力。"""

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def list_folders(self, db: Session, *, user: User, parent_id: Optional[int] = None) -> dict:
        cache = get_cache()
        key = cache.build_key("folders", parent_id if parent_id is not None else "root", user_id=user.id)
        cached = cache.get(key)
        if cached is not None:
            return create_response("获取文件夹列表成功", cached, HTTP_STATUS_OK)

        if parent_id is not None:
            self._require_readable(db, user=user, folder_id=parent_id)
        folders = folder_crud.list_visible(db, parent_id=parent_id, user_id=user.id)
        data = [self._serialize_for(db, folder, user) for folder in folders]
        cache.set(key, data, entity="folders")
        return create_response("获取文件夹列表成功", data, HTTP_STATUS_OK)

    def get_tree(self, db: Session, *, user: User, parent_id: Optional[int] = None) -> dict:
        """返回递归目录树：每个节点包含可见的子文件夹与可访问的文件。"""
        cache = get_cache()
        key = cache.build_key("folders-tree", parent_id if parent_id is not None else "root", user_id=user.id)
        cached = cache.get(key)
        if cached is not None:
            return create_response("获取目录树成功", cached, HTTP_STATUS_OK)

        current = None
        if parent_id is not None:
            current = self._require_readable(db, user=user, folder_id=parent_id)
        seen: set[int] = set()
        folders = [
            self._build_node(db, folder, user, seen)
            for folder in folder_crud.list_visible(db, parent_id=parent_id, user_id=user.id)
        ]
        files, _ = file_crud.list_accessible(db, user_id=user.id, folder_id=parent_id)
        data = {
            "folder": self._serialize_for(db, current, user) if current else None,
            "folders": folders,
            "files": [self._serialize_file_for(db, item, user) for item in files],
        }
        cache.set(key, data, entity="folders-tree")
        return create_response("获取目录树成功", data, HTTP_STATUS_OK)

    def get_detail(self, db: Session, *, user: User, folder_id: int) -> dict:
        folder = self._require_readable(db, user=user, folder_id=folder_id)
        data = self._serialize_for(db, folder, user)
        data["breadcrumb"] = self._breadcrumb(db, folder)
        return create_response("获取文件夹详情成功", data, HTTP_STATUS_OK)

    def shared_with_me(self, db: Session, *, user: User) -> dict:
        data = [
            serialize_folder(
                folder,
                extra={"shared_by": user_brief(share.shared_by), "access_level": share.access_level},
            )
            for folder, share in folder_crud.list_shared_with(db, user.id)
        ]
        return create_response("获取共享文件夹成功", data, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 变更
    # ------------------------------------------------------------------

    def create(
        self,
        db: Session,
        *,
        user: User,
        name: str,
        parent_id: Optional[int] = None,
        is_public: bool = False,
    ) -> dict:
        normalized = self.validate_name(name)
        parent = None
        if parent_id is not None:
            parent = self._get_or_404(db, parent_id, message="父文件夹不存在")
            self.ensure_writable(db, user=user, folder=parent)
        self._assert_unique_name(db, parent_id=parent_id, name=normalized)

        inherited_public = parent.is_public if parent is not None else bool(is_public)
        folder = Folder(
            name=normalized,
            parent_id=parent_id,
            is_public=inherited_public,
            access_type=(FolderAccessTypeEnum.PUBLIC if inherited_public else FolderAccessTypeEnum.PRIVATE).value,
            created_by=user.id,
        )
        db.add(folder)
        db.flush()
        folder.path = str(folder.id)
        get_upload_storage().ensure_dir(folder.path)
        db.commit()
        db.refresh(folder)

        logger.info("Folder %s (%s) created by user %s", folder.id, folder.name, user.id)
        invalidate_file_manager_cache()
        return create_response("创建文件夹成功", self._serialize_for(db, folder, user), HTTP_STATUS_OK)

    def update(
        self,
        db: Session,
        *,
        user: User,
        folder_id: int,
        name: Optional[str] = None,
        is_public: Optional[bool] = None,
        parent_id: Any = _UNSET,
    ) -> dict:
        folder = self._get_or_404(db, folder_id)
        ensure_owner_or_admin(user, folder.created_by, message="只能修改自己创建的文件夹")

        target_parent_id = folder.parent_id if parent_id is _UNSET else parent_id
        if parent_id is not _UNSET and parent_id != folder.parent_id:
            self._assert_can_move(db, user=user, folder=folder, new_parent_id=parent_id)

        if name is not None:
            folder.name = self.validate_name(name)
        if name is not None or target_parent_id != folder.parent_id:
            self._assert_unique_name(db, parent_id=target_parent_id, name=folder.name, exclude_id=folder.id)
        folder.parent_id = target_parent_id

        if is_public is not None:
            folder.is_public = bool(is_public)
        folder.access_type = self._access_type_for(folder)

        db.add(folder)
        db.commit()
        db.refresh(folder)
        logger.info("Folder %s updated by user %s", folder.id, user.id)
        invalidate_file_manager_cache()
        return create_response("更新文件夹成功", self._serialize_for(db, folder, user), HTTP_STATUS_OK)

    def delete(self, db: Session, *, user: User, folder_id: int) -> dict:
        folder = self._get_or_404(db, folder_id)
        ensure_owner_or_admin(
            user,
            folder.created_by,
            message="只能删除自己创建的文件夹",
            container_owner_id=folder.parent.created_by if folder.parent is not None else None,
        )
        if folder_crud.has_children(db, folder.id):
            raise AppException("文件夹包含子文件夹，无法删除", HTTP_STATUS_BAD_REQUEST)
        if file_crud.has_files(db, folder.id):
            raise AppException("文件夹不为空，无法删除", HTTP_STATUS_BAD_REQUEST)

        path = folder.path
        folder_crud.hard_delete(db, folder)
        get_upload_storage().remove_dir(path)
        logger.info("Folder %s deleted by user %s", folder_id, user.id)
        invalidate_file_manager_cache()
        return create_response("删除文件夹成功", {"id": folder_id}, HTTP_STATUS_OK)

    def share(
        self,
        db: Session,
        *,
        user: User,
        folder_id: int,
        user_ids: Iterable[int],
        access_level: Optional[str] = None,
    ) -> dict:
        folder = self._get_or_404(db, folder_id)
        ensure_owner_or_admin(user, folder.created_by, message="只能共享自己创建的文件夹")
        level = normalize_access_level(access_level, AccessLevelEnum.WRITE)
        targets = normalize_share_targets(db, user_ids, owner_id=folder.created_by)

        grants = folder_share_crud.upsert_many(
            db,
            folder_id=folder.id,
            user_ids=[target.id for target in targets],
            shared_by=user.id,
            access_level=level,
        )
        folder.access_type = self._access_type_for(folder, has_shares=bool(grants) or bool(folder.shares))
        db.add(folder)
        db.commit()

        logger.info("Folder %s shared with %s users (%s)", folder.id, len(grants), level)
        invalidate_file_manager_cache()
        data = {
            "folder_id": folder.id,
            "shared_with": [
                {"user_id": target.id, "username": target.username, "access_level": level} for target in targets
            ],
        }
        return create_response("共享文件夹成功", data, HTTP_STATUS_OK)

    # ------------------------------------------------------------------
    # 访问控制（供文件服务复用）
    # ------------------------------------------------------------------

    def share_level(self, db: Session, *, user: User, folder: Folder) -> Optional[str]:
        grant = folder_share_crud.get_grant(db, folder_id=folder.id, user_id=user.id)
        return grant.access_level if grant else None

    def can_read(self, db: Session, *, user: User, folder: Folder) -> bool:
        if folder.created_by == user.id or folder.is_public or is_admin_user(user):
            return True
        if folder.parent is not None and folder.parent.created_by == user.id:
            return True
        return self.share_level(db, user=user, folder=folder) is not None

    def can_write(self, db: Session, *, user: User, folder: Folder) -> bool:
        if folder.created_by == user.id or folder.is_public or is_admin_user(user):
            return True
        return self.share_level(db, user=user, folder=folder) == AccessLevelEnum.WRITE.value

    def ensure_writable(self, db: Session, *, user: User, folder: Folder) -> None:
        if not self.can_write(db, user=user, folder=folder):
            raise AppException("没有该文件夹的写入权限", HTTP_STATUS_FORBIDDEN)

    def get_writable(self, db: Session, *, user: User, folder_id: int, message: str = "目标文件夹不存在") -> Folder:
        folder = self._get_or_404(db, folder_id, message=message)
        self.ensure_writable(db, user=user, folder=folder)
        return folder

    @staticmethod
    def validate_name(name: Optional[str]) -> str:
        """名称必填、不超过 255 个字符且不能包含 ``< > : " / \\ | ? *``。"""
        normalized = (name or "").strip()
        if not normalized:
            raise AppException("文件夹名称不能为空", HTTP_STATUS_BAD_REQUEST)
        if len(normalized) > MAX_NAME_LENGTH:
            raise AppException(f"文件夹名称不能超过 {MAX_NAME_LENGTH} 个字符", HTTP_STATUS_BAD_REQUEST)
        if any(char in FOLDER_NAME_FORBIDDEN_CHARS for char in normalized):
            raise AppException("文件夹名称包含非法字符", HTTP_STATUS_BAD_REQUEST)
        return normalized

    # ------------------------------------------------------------------
    # 内部辅助方法
    # ------------------------------------------------------------------

    def _get_or_404(self, db: Session, folder_id: int, *, message: str = "文件夹不存在") -> Folder:
        folder = folder_crud.get(db, folder_id)
        if folder is None:
            raise AppException(message, HTTP_STATUS_NOT_FOUND)
        return folder

    def _require_readable(self, db: Session, *, user: User, folder_id: int) -> Folder:
        folder = self._get_or_404(db, folder_id)
        if not self.can_read(db, user=user, folder=folder):
            raise AppException("无权访问该文件夹", HTTP_STATUS_FORBIDDEN)
        return folder

    def _assert_unique_name(
        self,
        db: Session,
        *,
        parent_id: Optional[int],
        name: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        if folder_crud.find_sibling_by_name(db, parent_id=parent_id, name=name, exclude_id=exclude_id):
            raise AppException("同级目录下已存在同名文件夹", HTTP_STATUS_CONFLICT)

    def _assert_can_move(self, db: Session, *, user: User, folder: Folder, new_parent_id: Optional[int]) -> None:
        if new_parent_id is None:
            return
        if new_parent_id == folder.id:
            raise AppException("不能将文件夹移动到自身或其子文件夹中", HTTP_STATUS_BAD_REQUEST)
        new_parent = self.get_writable(db, user=user, folder_id=new_parent_id)
        if folder.id in folder_crud.ancestor_ids(db, new_parent):
            raise AppException("不能将文件夹移动到自身或其子文件夹中", HTTP_STATUS_BAD_REQUEST)

    @staticmethod
    def _access_type_for(folder: Folder, *, has_shares: Optional[bool] = None) -> str:
        if folder.is_public:
            return FolderAccessTypeEnum.PUBLIC.value
        shared = bool(folder.shares) if has_shares is None else has_shares
        return (FolderAccessTypeEnum.SHARED if shared else FolderAccessTypeEnum.PRIVATE).value

    def _serialize_for(self, db: Session, folder: Folder, user: User) -> dict:
        extra: dict[str, Any] = {"is_owner": folder.created_by == user.id}
        if folder.created_by != user.id:
            grant = folder_share_crud.get_grant(db, folder_id=folder.id, user_id=user.id)
            if grant is not None:
                extra["shared_by"] = user_brief(grant.shared_by)
                extra["access_level"] = grant.access_level
        return serialize_folder(folder, extra=extra)

    def _build_node(self, db: Session, folder: Folder, user: User, seen: set[int]) -> dict:
        seen.add(folder.id)
        node = self._serialize_for(db, folder, user)
        node["subfolders"] = [
            self._build_node(db, child, user, seen)
            for child in folder_crud.list_visible(db, parent_id=folder.id, user_id=user.id)
            if child.id not in seen
        ]
        files, _ = file_crud.list_accessible(db, user_id=user.id, folder_id=folder.id)
        node["files"] = [self._serialize_file_for(db, item, user) for item in files]
        return node

    def _serialize_file_for(self, db: Session, item, user: User) -> dict:
        extra: dict[str, Any] = {}
        if item.uploaded_by != user.id:
            grant = file_share_crud.get_grant(db, file_id=item.id, user_id=user.id)
            if grant is not None:
                extra["shared_by"] = user_brief(grant.shared_by)
                extra["access_level"] = grant.access_level
        return serialize_file(item, extra=extra)

    def _breadcrumb(self, db: Session, folder: Folder) -> list[dict]:
        chain = [folder]
        for ancestor_id in folder_crud.ancestor_ids(db, folder):
            ancestor = folder_crud.get(db, ancestor_id)
            if ancestor is not None:
                chain.append(ancestor)
        return [{"id": item.id, "name": item.name} for item in reversed(chain)]


folder_service = FolderService()
