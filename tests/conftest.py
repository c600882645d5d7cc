"""测试夹具：为 pytest 提供隔离的记录存储与 HTTP 客户端。"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from ftprovider.core.addresses import CollectionAddress
from ftprovider.core.ids import SequenceIdGenerator
from ftprovider.main import create_app
from ftprovider.services.file_transfer_store import FileTransferStore
from ftprovider.services.notifier import ChangeNotifier


@pytest.fixture()
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'ft.db'}"


@pytest.fixture()
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture()
def store(database_url, notifier) -> Generator[FileTransferStore, None, None]:
    """每个用例使用独立的 SQLite 文件。"""
    ft_store = FileTransferStore(database_url, notifier=notifier)
    try:
        yield ft_store
    finally:
        ft_store.close()


@pytest.fixture()
def sequential_store(database_url, notifier) -> Generator[FileTransferStore, None, None]:
    """主键从 100 开始依次递增，便于断言。"""
    ft_store = FileTransferStore(database_url, notifier=notifier, id_generator=SequenceIdGenerator(100))
    try:
        yield ft_store
    finally:
        ft_store.close()


@pytest.fixture()
def changes(notifier):
    """记录所有变更通知的 URI。"""
    seen: list[str] = []
    notifier.register(
        CollectionAddress(),
        lambda address: seen.append(address.uri),
    )
    return seen


@pytest.fixture()
def sample_fields() -> dict:
    return {
        "session_id": "s1",
        "contact": "c1",
        "name": "a.png",
        "mime_type": "image/png",
        "status": 1,
        "direction": 0,
        "timestamp": 1000,
        "size": 0,
        "total_size": 500,
    }


@pytest.fixture()
def client(store) -> Generator[TestClient, None, None]:
    """构建 TestClient，并注入测试专用的记录存储。"""
    app = create_app(store)
    with TestClient(app) as test_client:
        yield test_client
