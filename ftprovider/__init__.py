"""File transfer record provider: address-based CRUD over the ``ft`` table."""

from ftprovider.core.addresses import AliasCollectionAddress, CollectionAddress, RecordAddress, parse_address
from ftprovider.core.exceptions import (
    ConstraintError,
    InvalidFieldError,
    ProviderError,
    UnknownTarget,
    UnsupportedTarget,
)
from ftprovider.services.file_transfer_store import FileTransferStore, RecordCursor
from ftprovider.services.notifier import ChangeNotifier

__all__ = [
    "AliasCollectionAddress",
    "ChangeNotifier",
    "CollectionAddress",
    "ConstraintError",
    "FileTransferStore",
    "InvalidFieldError",
    "ProviderError",
    "RecordAddress",
    "RecordCursor",
    "UnknownTarget",
    "UnsupportedTarget",
    "parse_address",
]
