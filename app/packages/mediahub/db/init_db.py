"""Database bootstrapping utilities."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.packages.mediahub.core.constants import (
    ADMIN_ROLE,
    AUTHOR_PERMISSIONS,
    AUTHOR_ROLE,
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_ADMIN_FULL_NAME,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_ADMIN_USERNAME,
    DEFAULT_CATEGORIES,
    DEFAULT_PERMISSIONS,
    PUBLIC_FOLDER_NAME,
)
from app.packages.mediahub.core.enums import FolderAccessTypeEnum, RoleStatusEnum
from app.packages.mediahub.core.logger import get_logger
from app.packages.mediahub.core.security import get_password_hash
from app.packages.mediahub.crud.categories import category_crud
from app.packages.mediahub.crud.folders import folder_crud
from app.packages.mediahub.crud.roles import permission_crud, role_crud
from app.packages.mediahub.crud.users import user_crud
from app.packages.mediahub.db import session as db_session
from app.packages.mediahub.models import Category, Folder, Permission, Role, User
from app.packages.mediahub.models.base import Base
from app.packages.mediahub.services.storage_service import get_upload_storage

logger = get_logger("db")


def init_db() -> None:
    """Create all database tables if they do not exist and seed baseline data."""
    Base.metadata.create_all(bind=db_session.engine)

    session = db_session.SessionLocal()
    try:
        permissions = _seed_permissions(session)
        admin_role, author_role = _seed_roles(session, permissions)
        admin = _seed_admin(session, admin_role)
        _seed_categories(session)
        _seed_public_folder(session, admin)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to seed default data during database initialization")
        raise
    finally:
        session.close()


def _seed_permissions(db: Session) -> dict[str, Permission]:
    permissions: dict[str, Permission] = {}
    for slug, name in DEFAULT_PERMISSIONS:
        permission = permission_crud.get_by_slug(db, slug)
        if permission is None:
            permission = Permission(name=name, slug=slug)
            db.add(permission)
            db.flush()
        permissions[slug] = permission
    return permissions


def _seed_roles(db: Session, permissions: dict[str, Permission]) -> tuple[Role, Role]:
    """Ensure the built-in administrator and author roles exist with their grants."""
    admin_role = role_crud.get_by_slug(db, ADMIN_ROLE)
    if admin_role is None:
        admin_role = Role(
            name="管理员",
            slug=ADMIN_ROLE,
            description="拥有全部权限的系统管理员",
            sort_order=1,
            status=RoleStatusEnum.NORMAL.value,
        )
        db.add(admin_role)
    admin_role.permissions = list(permissions.values())

    author_role = role_crud.get_by_slug(db, AUTHOR_ROLE)
    if author_role is None:
        author_role = Role(
            name="作者",
            slug=AUTHOR_ROLE,
            description="可以上传文件并撰写发布内容",
            sort_order=2,
            status=RoleStatusEnum.NORMAL.value,
        )
        db.add(author_role)
        author_role.permissions = [permissions[slug] for slug in AUTHOR_PERMISSIONS]
    db.flush()
    return admin_role, author_role


def _seed_admin(db: Session, admin_role: Role) -> User:
    admin = user_crud.get_by_username(db, DEFAULT_ADMIN_USERNAME)
    if admin is None:
        admin = User(
            username=DEFAULT_ADMIN_USERNAME,
            email=DEFAULT_ADMIN_EMAIL,
            full_name=DEFAULT_ADMIN_FULL_NAME,
            hashed_password=get_password_hash(DEFAULT_ADMIN_PASSWORD),
            is_active=True,
        )
        db.add(admin)
        logger.info("Default administrator '%s' created", DEFAULT_ADMIN_USERNAME)
    if admin_role not in admin.roles:
        admin.roles.append(admin_role)
    db.flush()
    return admin


def _seed_categories(db: Session) -> None:
    for order, name in enumerate(DEFAULT_CATEGORIES, start=1):
        slug = name.lower()
        if category_crud.get_by_slug(db, slug) is not None:
            continue
        db.add(Category(name=name, slug=slug, show_on_menu=True, menu_order=order))
    db.flush()


def _seed_public_folder(db: Session, admin: User) -> None:
    """Create the shared ``Public`` root folder visible to every user."""
    folder = folder_crud.get_root_by_name(db, PUBLIC_FOLDER_NAME)
    if folder is None:
        folder = Folder(
            name=PUBLIC_FOLDER_NAME,
            parent_id=None,
            is_public=True,
            access_type=FolderAccessTypeEnum.PUBLIC.value,
            created_by=admin.id,
        )
        db.add(folder)
        db.flush()
        folder.path = str(folder.id)
        logger.info("Public folder created with id %s", folder.id)
    get_upload_storage().ensure_dir(folder.path)
