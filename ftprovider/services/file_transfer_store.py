"""文件传输记录存储：按地址提供增删改查、类型查询与变更通知。

每个公开方法都在独立的会话与事务中完成，没有跨调用的状态；存储对象只持有
数据库引擎。引擎与表结构在首次使用时惰性打开，由宿主进程负责 ``close``。
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from sqlalchemy import and_
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Query, Session, sessionmaker

from ftprovider.core.addresses import (
    Address,
    AliasCollectionAddress,
    CollectionAddress,
    RecordAddress,
    parse_address,
    type_descriptor,
)
from ftprovider.core.config import get_settings
from ftprovider.core.exceptions import InvalidFieldError, UnknownTarget, UnsupportedTarget
from ftprovider.core.ids import ClockIdGenerator, IdGenerator, non_negative
from ftprovider.crud.base import Where
from ftprovider.crud.file_transfer import Sort, file_transfer_crud
from ftprovider.db.init_db import init_db
from ftprovider.db.session import build_engine, build_session_factory
from ftprovider.models.file_transfer import FileTransfer
from ftprovider.services.notifier import ChangeNotifier

logger = logging.getLogger(__name__)

Target = Union[str, Address]

_YIELD_PER = 100


class RecordCursor:
    """惰性、只进的查询结果。

    逐行产出 ``dict``；遍历结束或调用 ``close`` 时释放会话。``address``
    记录了查询所用的地址，调用方可以据此订阅变更通知。
    """

    def __init__(self, session: Session, query: Query, address: Address) -> None:
        self.address = address
        self._session: Optional[Session] = session
        self._rows = iter(query.yield_per(_YIELD_PER))

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return self

    def __next__(self) -> Dict[str, Any]:
        if self._session is None:
            raise StopIteration
        try:
            row = next(self._rows)
        except Exception:
            # 包括 StopIteration：结果耗尽或出错都立即归还连接
            self.close()
            raise
        return dict(row._mapping)

    def first(self) -> Optional[Dict[str, Any]]:
        """返回第一行（没有结果时为 ``None``），并关闭游标。"""
        try:
            return next(self, None)
        finally:
            self.close()

    def all(self) -> List[Dict[str, Any]]:
        return list(self)

    @property
    def closed(self) -> bool:
        return self._session is None

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "RecordCursor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FileTransferStore:
    """文件传输记录的唯一入口。

    :param database_url: 数据库连接串，默认取配置中的 ``sql_database_url``。
    :param notifier: 变更通知注册表，未提供时新建一个。
    :param id_generator: 主键生成器，默认使用 ``ClockIdGenerator``。
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        notifier: Optional[ChangeNotifier] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        settings = get_settings()
        self.database_url = database_url or settings.sql_database_url
        self.notifier = notifier or ChangeNotifier()
        self._id_generator = id_generator or ClockIdGenerator()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._open_lock = threading.Lock()

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def open(self) -> Engine:
        """打开数据库并确保表结构存在，重复调用直接返回已有引擎。"""
        with self._open_lock:
            if self._engine is None:
                engine = build_engine(self.database_url)
                init_db(engine)
                self._session_factory = build_session_factory(engine)
                self._engine = engine
                logger.info("File transfer store opened at %s", engine.url.render_as_string(hide_password=True))
        return self._engine

    def close(self) -> None:
        with self._open_lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                self._session_factory = None
                logger.info("File transfer store closed")

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def __enter__(self) -> "FileTransferStore":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _session(self) -> Session:
        self.open()
        return self._session_factory()

    # ------------------------------------------------------------------
    # 操作
    # ------------------------------------------------------------------

    def type_of(self, target: Target) -> str:
        """返回地址对应的内容类型，集合与单条记录不同。"""
        descriptor = type_descriptor(parse_address(target))
        if descriptor is None:
            raise UnknownTarget(target)
        return descriptor

    def create(self, target: Target, fields: Mapping[str, Any]) -> int:
        """插入一条新记录并返回生成的主键。

        单条记录地址中的 id 会被忽略；别名集合只读。
        """
        address = parse_address(target)
        if not isinstance(address, (CollectionAddress, RecordAddress)):
            raise UnsupportedTarget(target, "insert")

        values = file_transfer_crud.normalize_values(fields)
        values["id"] = non_negative(self._id_generator())
        with self._session() as db:
            file_transfer_crud.create(db, values)

        record_id = values["id"]
        logger.debug("Inserted file transfer %s", record_id)
        self.notifier.notify_change(RecordAddress(record_id))
        return record_id

    def read(
        self,
        target: Target,
        where: Where = None,
        sort: Sort = None,
        projection: Optional[List[str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> RecordCursor:
        """按地址查询记录，返回惰性游标；单条记录地址最多产出一行。"""
        address = parse_address(target)
        if not isinstance(address, (CollectionAddress, RecordAddress, AliasCollectionAddress)):
            raise UnknownTarget(target)

        db = self._session()
        try:
            query = file_transfer_crud.select(
                db, where=self._scoped(address, where, params), sort=sort, projection=projection
            )
            return RecordCursor(db, query, address)
        except Exception:
            db.close()
            raise

    def get(self, record_id: int) -> Optional[Dict[str, Any]]:
        """按主键读取单条记录，不存在时返回 ``None``。"""
        return self.read(RecordAddress(record_id)).first()

    def update(
        self,
        target: Target,
        fields: Mapping[str, Any],
        where: Where = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """覆盖写入部分字段，返回受影响行数；无论是否命中都会发出变更通知。

        写入字段为空时抛出 ``InvalidFieldError``。
        """
        address = self._writable(target, "update")
        values = file_transfer_crud.normalize_values(fields)
        condition = self._scoped(address, where, params)
        if not values:
            raise InvalidFieldError("Empty values for update")

        with self._session() as db:
            count = file_transfer_crud.update_where(db, values, where=condition)

        logger.debug("Updated %s file transfer(s) at %s", count, address.uri)
        self.notifier.notify_change(address)
        return count

    def delete(
        self,
        target: Target,
        where: Where = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """删除匹配的记录并返回删除行数；无论是否命中都会发出变更通知。"""
        address = self._writable(target, "delete")

        with self._session() as db:
            count = file_transfer_crud.delete_where(db, where=self._scoped(address, where, params))

        logger.debug("Deleted %s file transfer(s) at %s", count, address.uri)
        self.notifier.notify_change(address)
        return count

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    @staticmethod
    def _writable(target: Target, operation: str) -> Address:
        address = parse_address(target)
        if not isinstance(address, (CollectionAddress, RecordAddress)):
            raise UnsupportedTarget(target, operation)
        return address

    @staticmethod
    def _scoped(address: Address, where: Where, params: Optional[Mapping[str, Any]]):
        """把调用方条件与地址中的主键合并为一个表达式（AND）。"""
        condition = file_transfer_crud.build_filter(where, params)
        if isinstance(address, RecordAddress):
            return and_(FileTransfer.id == address.record_id, condition)
        return condition
