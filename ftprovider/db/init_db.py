"""Schema bootstrapping for the ``ft`` table.

The table carries a single schema version. SQLite keeps it in
``PRAGMA user_version``; any mismatch drops and recreates the table, without
preserving rows.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ftprovider.models.base import Base
from ftprovider.models.file_transfer import FileTransfer

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def get_schema_version(connection: Connection) -> int:
    return int(connection.execute(text("PRAGMA user_version")).scalar() or 0)


def _set_schema_version(connection: Connection, version: int) -> None:
    # PRAGMA 不支持参数绑定
    connection.execute(text(f"PRAGMA user_version = {int(version)}"))


def init_db(engine: Engine, *, version: int = SCHEMA_VERSION) -> None:
    """创建或升级 ``ft`` 表。

    - 新数据库（版本 0）：直接建表；
    - 版本不一致：删除旧表后重建，旧数据全部丢弃；
    - 非 SQLite 数据库没有版本号，仅在表不存在时建表。
    """
    table = FileTransfer.__table__
    if engine.dialect.name != "sqlite":
        Base.metadata.create_all(bind=engine, tables=[table])
        return

    with engine.begin() as connection:
        current = get_schema_version(connection)
        if current == version:
            table.create(bind=connection, checkfirst=True)
            return
        if current == 0:
            logger.info("Creating table %s (schema version %s)", table.name, version)
        else:
            logger.warning(
                "Schema version changed from %s to %s, dropping table %s", current, version, table.name
            )
            table.drop(bind=connection, checkfirst=True)
        table.create(bind=connection, checkfirst=True)
        _set_schema_version(connection, version)
