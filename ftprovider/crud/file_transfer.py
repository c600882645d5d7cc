"""文件传输记录 CRUD：字段校验、排序表达式解析与按条件读写。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from ftprovider.core.exceptions import InvalidFieldError
from ftprovider.crud.base import CRUDBase, Where
from ftprovider.models.file_transfer import FIELD_COLUMNS, FileTransfer

Sort = Union[str, ColumnElement, Sequence[Union[str, ColumnElement]], None]

_DIRECTIONS = {"ASC": False, "DESC": True}


class CRUDFileTransfer(CRUDBase[FileTransfer]):
    field_columns = FIELD_COLUMNS

    def normalize_values(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """校验写入字段，统一为属性名；主键不允许由调用方写入。"""
        normalized: Dict[str, Any] = {}
        for key, value in values.items():
            field = self.resolve_field(key)
            if field == "id":
                raise InvalidFieldError("Field 'id' is assigned by the store and cannot be written")
            normalized[field] = value
        return normalized

    def order_by(self, sort: Sort) -> List[Any]:
        """解析排序参数，例如 ``"timestamp DESC, name"``。"""
        if sort is None:
            return []
        items: Iterable[Union[str, ColumnElement]]
        if isinstance(sort, str):
            items = [part for part in sort.split(",") if part.strip()]
        elif isinstance(sort, ColumnElement):
            items = [sort]
        else:
            items = sort

        clauses: List[Any] = []
        for item in items:
            if not isinstance(item, str):
                clauses.append(item)
                continue
            tokens = item.split()
            if not tokens or len(tokens) > 2:
                raise InvalidFieldError(f"Invalid sort expression {item!r}")
            descending = False
            if len(tokens) == 2:
                direction = tokens[1].upper()
                if direction not in _DIRECTIONS:
                    raise InvalidFieldError(f"Invalid sort direction {tokens[1]!r}")
                descending = _DIRECTIONS[direction]
            attr = getattr(self.model, self.resolve_field(tokens[0]))
            clauses.append(attr.desc() if descending else attr.asc())
        return clauses

    def select(
        self,
        db: Session,
        *,
        where: Where = None,
        params: Optional[Mapping[str, Any]] = None,
        sort: Sort = None,
        projection: Optional[Iterable[str]] = None,
    ) -> Query:
        query = self.query(db, projection).filter(self.build_filter(where, params))
        clauses = self.order_by(sort)
        if clauses:
            query = query.order_by(*clauses)
        return query


file_transfer_crud = CRUDFileTransfer(FileTransfer)
