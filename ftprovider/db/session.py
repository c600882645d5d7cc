"""Database engine and session factory construction.

Nothing here is created at import time: the store builds its own engine
from a URL and owns it for its lifetime. SQL statement logging goes through
the ``sqlalchemy.engine`` logger configured in ``core.logger``.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _enable_wal(engine: Engine) -> None:
    # WAL 模式下未读完的游标不会阻塞写入
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


def build_engine(url: str) -> Engine:
    """Create an engine, adjusting connection handling for SQLite.

    SQLite connections are shared across threads, file databases run in WAL
    mode, and in-memory databases keep a single connection so every session
    sees the same data.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        # ``pool_pre_ping`` keeps the connection pool healthy for server databases.
        return create_engine(url, pool_pre_ping=True)

    if parsed.database in (None, "", ":memory:"):
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)

    engine = create_engine(url, connect_args={"check_same_thread": False})
    _enable_wal(engine)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
