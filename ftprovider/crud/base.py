"""CRUD 基类：为实体提供通用的按条件查询、写入与批量维护方法。"""

from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from sqlalchemy import and_, text, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from ftprovider.core.exceptions import ConstraintError, InvalidFieldError
from ftprovider.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)

# 过滤条件：SQLAlchemy 表达式、原始 SQL 片段，或“字段 -> 值”的等值映射
Where = Union[ColumnElement, str, Mapping[str, Any], None]


class CRUDBase(Generic[ModelType]):
    """封装常见的查询、创建与批量更新逻辑，减少重复代码。"""

    # 子类可提供“对外字段名 -> 列名”的映射，用于校验与别名解析
    field_columns: Dict[str, str] = {}

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def create(self, db: Session, obj_in: Dict[str, Any], *, auto_commit: bool = True) -> ModelType:
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        if auto_commit:
            self._commit(db)
        return db_obj

    def update_where(
        self,
        db: Session,
        values: Dict[str, Any],
        *,
        where: Where = None,
        params: Optional[Mapping[str, Any]] = None,
        auto_commit: bool = True,
    ) -> int:
        """按条件批量更新，返回受影响的行数。"""
        count = (
            db.query(self.model)
            .filter(self.build_filter(where, params))
            .update({getattr(self.model, key): value for key, value in values.items()}, synchronize_session=False)
        )
        if auto_commit:
            self._commit(db)
        return count

    def delete_where(
        self,
        db: Session,
        *,
        where: Where = None,
        params: Optional[Mapping[str, Any]] = None,
        auto_commit: bool = True,
    ) -> int:
        """按条件物理删除，返回删除的行数。"""
        count = db.query(self.model).filter(self.build_filter(where, params)).delete(synchronize_session=False)
        if auto_commit:
            self._commit(db)
        return count

    def query(self, db: Session, columns: Optional[Iterable[str]] = None) -> Query:
        """构造查询；``columns`` 为空时返回全部字段。"""
        names: List[str] = [self.resolve_field(name) for name in columns] if columns else list(self.field_columns)
        return db.query(*[getattr(self.model, name).label(name) for name in names])

    def build_filter(self, where: Where, params: Optional[Mapping[str, Any]] = None) -> ColumnElement:
        if where is None:
            return true()
        if isinstance(where, str):
            if not where.strip():
                return true()
            clause = text(where)
            return clause.bindparams(**params) if params else clause
        if isinstance(where, Mapping):
            conditions = []
            for key, value in where.items():
                attr = getattr(self.model, self.resolve_field(key))
                conditions.append(attr.is_(None) if value is None else attr == value)
            return and_(true(), *conditions)
        return where

    def resolve_field(self, name: str) -> str:
        """把对外字段名或数据库列名统一为模型属性名。"""
        if name in self.field_columns:
            return name
        for field, column in self.field_columns.items():
            if column == name:
                return field
        raise InvalidFieldError(f"Unknown field {name!r}")

    @staticmethod
    def _commit(db: Session) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError(str(exc.orig)) from exc
