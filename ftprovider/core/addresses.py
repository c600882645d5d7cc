"""地址模型：文件传输记录支持的三种寻址形式及其 URI 解析。

- ``CollectionAddress``：``content://<provider>/ft``，作用于全部记录；
- ``RecordAddress``：``content://<provider>/ft/<id>``，作用于单条记录；
- ``AliasCollectionAddress``：``content://<alias>/ft``，主集合的别名，只读。

任何其它 URI 都解析为 ``None``，由调用方决定抛出哪一种错误。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlsplit

from ftprovider.core.config import get_settings

SCHEME = "content"
TABLE_PATH = "ft"

COLLECTION_TYPE = "vnd.android.cursor.dir/com.orangelabs.rcs.ft"
RECORD_TYPE = "vnd.android.cursor.item/com.orangelabs.rcs.ft"

MAX_RECORD_ID = 2**63 - 1
_ID_SEGMENT = re.compile(r"[0-9]+")


def _provider_authority() -> str:
    return get_settings().provider_authority


def _alias_authority() -> str:
    return get_settings().alias_authority


@dataclass(frozen=True)
class CollectionAddress:
    authority: str = ""

    @property
    def uri(self) -> str:
        return f"{SCHEME}://{self.authority or _provider_authority()}/{TABLE_PATH}"

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class RecordAddress:
    record_id: int
    authority: str = ""

    @property
    def uri(self) -> str:
        return f"{SCHEME}://{self.authority or _provider_authority()}/{TABLE_PATH}/{self.record_id}"

    @property
    def parent(self) -> CollectionAddress:
        return CollectionAddress(self.authority)

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class AliasCollectionAddress:
    authority: str = ""

    @property
    def uri(self) -> str:
        return f"{SCHEME}://{self.authority or _alias_authority()}/{TABLE_PATH}"

    def __str__(self) -> str:
        return self.uri


Address = Union[CollectionAddress, RecordAddress, AliasCollectionAddress]


def parse_address(target: Union[str, Address, None]) -> Optional[Address]:
    """把 URI 字符串解析为地址对象；无法识别时返回 ``None``。

    已经是地址对象的参数原样返回，便于存储接口同时接受两种写法。
    """
    if isinstance(target, (CollectionAddress, RecordAddress, AliasCollectionAddress)):
        return target
    if not isinstance(target, str):
        return None

    parts = urlsplit(target.strip())
    if parts.scheme != SCHEME or parts.query or parts.fragment:
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments or segments[0] != TABLE_PATH:
        return None

    authority = parts.netloc
    if authority == _provider_authority():
        if len(segments) == 1:
            return CollectionAddress()
        # 仅接受十进制数字段，与 "ft/#" 的匹配规则一致
        if len(segments) == 2 and _ID_SEGMENT.fullmatch(segments[1]):
            record_id = int(segments[1])
            if record_id <= MAX_RECORD_ID:
                return RecordAddress(record_id)
        return None
    if authority == _alias_authority() and len(segments) == 1:
        return AliasCollectionAddress()
    return None


def type_descriptor(address: Optional[Address]) -> Optional[str]:
    """返回地址对应的内容类型描述；未知地址返回 ``None``。"""
    if isinstance(address, (CollectionAddress, AliasCollectionAddress)):
        return COLLECTION_TYPE
    if isinstance(address, RecordAddress):
        return RECORD_TYPE
    return None


def is_descendant(child: Address, ancestor: Address) -> bool:
    """判断 ``child`` 是否位于 ``ancestor`` 所指集合之下。"""
    child_uri = child.uri
    ancestor_uri = ancestor.uri.rstrip("/")
    return child_uri != ancestor_uri and child_uri.startswith(ancestor_uri + "/")
