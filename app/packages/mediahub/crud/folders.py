"""文件夹 CRUD：按父级与可见性（拥有/共享/公开）查询。"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session, aliased

from app.packages.mediahub.core.constants import PUBLIC_FOLDER_NAME
from app.packages.mediahub.crud.base import CRUDBase
from app.packages.mediahub.models.folder import Folder
from app.packages.mediahub.models.share import FolderShare


def owned_folder_ids(user_id: int):
    """本人创建的文件夹 ID；别名子查询，不与外层 ``Folder`` 关联。"""
    owned = aliased(Folder)
    return select(owned.id).where(owned.created_by == user_id)


def folder_visibility_clause(user_id: int):
    """当前用户可见的文件夹：本人创建、位于本人文件夹内、共享给本人或公开。"""
    shared_ids = select(FolderShare.folder_id).where(FolderShare.shared_with_user_id == user_id)
    return or_(
        Folder.created_by == user_id,
        Folder.parent_id.in_(owned_folder_ids(user_id)),
        Folder.is_public.is_(True),
        Folder.id.in_(shared_ids),
    )


class CRUDFolder(CRUDBase[Folder]):
    def list_visible(self, db: Session, *, parent_id: Optional[int], user_id: int) -> list[Folder]:
        """列出父级下当前用户可见的文件夹；根目录下 ``Public`` 固定排在首位。"""
        query = self.query(db).filter(folder_visibility_clause(user_id))
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None)).order_by(
                case((Folder.name == PUBLIC_FOLDER_NAME, 0), else_=1),
                Folder.name.asc(),
            )
        else:
            query = query.filter(Folder.parent_id == parent_id).order_by(Folder.name.asc())
        return query.all()

    def find_sibling_by_name(
        self,
        db: Session,
        *,
        parent_id: Optional[int],
        name: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Folder]:
        """同级目录下大小写不敏感的重名检查。"""
        query = self.query(db).filter(func.lower(Folder.name) == name.strip().lower())
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)
        if exclude_id is not None:
            query = query.filter(Folder.id != exclude_id)
        return query.first()

    def has_children(self, db: Session, folder_id: int) -> bool:
        return self.query(db).filter(Folder.parent_id == folder_id).first() is not None

    def get_root_by_name(self, db: Session, name: str) -> Optional[Folder]:
        return self.query(db).filter(Folder.parent_id.is_(None), Folder.name == name).first()

    def ancestor_ids(self, db: Session, folder: Folder) -> list[int]:
        """自下而上收集祖先 ID，遇到环时停止。"""
        ids: list[int] = []
        seen = {folder.id}
        current = folder.parent_id
        while current is not None and current not in seen:
            ids.append(current)
            seen.add(current)
            parent = self.get(db, current)
            current = parent.parent_id if parent else None
        return ids

    def list_shared_with(self, db: Session, user_id: int) -> list[tuple[Folder, FolderShare]]:
        return (
            db.query(Folder, FolderShare)
            .join(FolderShare, FolderShare.folder_id == Folder.id)
            .filter(FolderShare.shared_with_user_id == user_id)
            .order_by(Folder.name.asc())
            .all()
        )


folder_crud = CRUDFolder(Folder)
