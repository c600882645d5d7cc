"""变更通知注册表测试。"""

import logging

from ftprovider.core.addresses import AliasCollectionAddress, CollectionAddress, RecordAddress
from ftprovider.services.notifier import ChangeNotifier


def test_collection_observer_receives_record_changes():
    notifier = ChangeNotifier()
    seen = []
    notifier.register(CollectionAddress(), seen.append)

    notifier.notify_change(RecordAddress(5))

    assert seen == [RecordAddress(5)]


def test_descendants_can_be_excluded():
    notifier = ChangeNotifier()
    seen = []
    notifier.register(CollectionAddress(), seen.append, notify_for_descendants=False)

    assert notifier.notify_change(RecordAddress(5)) == 0
    assert notifier.notify_change(CollectionAddress()) == 1
    assert seen == [CollectionAddress()]


def test_record_observer_receives_collection_changes():
    notifier = ChangeNotifier()
    seen = []
    notifier.register(RecordAddress(9), seen.append)

    notifier.notify_change(CollectionAddress())
    notifier.notify_change(RecordAddress(10))

    assert seen == [CollectionAddress()]


def test_alias_observer_is_separate_namespace():
    notifier = ChangeNotifier()
    seen = []
    notifier.register(AliasCollectionAddress(), seen.append)

    notifier.notify_change(CollectionAddress())
    notifier.notify_change(RecordAddress(1))

    assert seen == []


def test_unregister():
    notifier = ChangeNotifier()
    seen = []
    handle = notifier.register(CollectionAddress(), seen.append)

    assert notifier.unregister(handle) is True
    assert notifier.unregister(handle) is False
    notifier.notify_change(CollectionAddress())
    assert seen == []


def test_failing_observer_is_logged_and_others_still_run(caplog):
    notifier = ChangeNotifier()
    seen = []

    def broken(address):
        raise RuntimeError("boom")

    notifier.register(CollectionAddress(), broken)
    notifier.register(CollectionAddress(), seen.append)

    # 应用日志器不向 root 传播，直接挂上 caplog 的 handler
    notifier_logger = logging.getLogger("ftprovider.services.notifier")
    notifier_logger.addHandler(caplog.handler)
    try:
        assert notifier.notify_change(CollectionAddress()) == 2
    finally:
        notifier_logger.removeHandler(caplog.handler)

    assert seen == [CollectionAddress()]
    assert "boom" in caplog.text
    assert caplog.records[-1].address == CollectionAddress().uri


def test_store_notifies_created_record(store, notifier, sample_fields):
    seen = []
    notifier.register(CollectionAddress(), seen.append)

    record_id = store.create(CollectionAddress(), sample_fields)

    assert seen == [RecordAddress(record_id)]
