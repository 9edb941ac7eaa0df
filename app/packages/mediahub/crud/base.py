"""CRUD 基类：为各实体提供通用的数据访问方法。"""

from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.packages.mediahub.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """封装常见的查询、创建与保存逻辑，减少重复代码。"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        if id is None:
            return None
        return self.query(db).filter(self.model.id == id).first()

    def list_by_ids(self, db: Session, ids: Iterable[int]) -> List[ModelType]:
        """根据主键集合批量查询。"""
        id_set = {item for item in ids if item is not None}
        if not id_set:
            return []
        return self.query(db).filter(self.model.id.in_(id_set)).all()

    def count(self, db: Session) -> int:
        return self.query(db).count()

    def get_by_slug(self, db: Session, slug: str) -> Optional[ModelType]:
        """按 slug 查询（大小写不敏感），仅适用于带 ``slug`` 字段的模型。"""
        normalized = (slug or "").strip().lower()
        return self.query(db).filter(func.lower(self.model.slug) == normalized).first()

    def create(self, db: Session, obj_in: Dict[str, Any], *, auto_commit: bool = True) -> ModelType:
        return self.save(db, self.model(**obj_in), auto_commit=auto_commit)

    def save(self, db: Session, db_obj: ModelType, *, auto_commit: bool = True) -> ModelType:
        """写入会话；``auto_commit`` 为假时只 flush 以便拿到主键。"""
        db.add(db_obj)
        if auto_commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def soft_delete(self, db: Session, db_obj: ModelType, *, auto_commit: bool = True) -> ModelType:
        """执行软删除，如果模型支持软删除字段则仅标记。"""
        if hasattr(db_obj, "is_deleted"):
            db_obj.is_deleted = True
            db.add(db_obj)
        else:
            db.delete(db_obj)
        if auto_commit:
            db.commit()
        return db_obj

    def hard_delete(self, db: Session, db_obj: ModelType, *, auto_commit: bool = True) -> None:
        """物理删除行，并提交事务。"""
        db.delete(db_obj)
        if auto_commit:
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise

    # 统一构造带软删除过滤的查询
    def query(self, db: Session, *, include_deleted: bool = False) -> Query:
        query = db.query(self.model)
        if hasattr(self.model, "is_deleted") and not include_deleted:
            query = query.filter(self.model.is_deleted.is_(False))
        return query
