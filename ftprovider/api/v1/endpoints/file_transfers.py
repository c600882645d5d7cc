"""文件传输记录相关的路由定义。

路径与记录地址一一对应：``/ft`` 为主集合，``/ft/{id}`` 为单条记录，
``/joyn/ft`` 为别名集合（只读）。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ftprovider.api.v1.schemas.file_transfers import (
    FileTransferCreateResponse,
    FileTransferDetailResponse,
    FileTransferFields,
    FileTransferListResponse,
    FileTransferMutationResponse,
    TypeDescriptorResponse,
)
from ftprovider.core.addresses import MAX_RECORD_ID, AliasCollectionAddress, CollectionAddress, RecordAddress
from ftprovider.core.dependencies import get_store
from ftprovider.core.exceptions import AppException
from ftprovider.core.responses import create_response
from ftprovider.services.file_transfer_store import FileTransferStore

router = APIRouter(prefix="/ft", tags=["file_transfers"])
alias_router = APIRouter(prefix="/joyn/ft", tags=["file_transfers"])
type_router = APIRouter(prefix="/types", tags=["file_transfers"])


class RecordFilter:
    """查询参数中的等值过滤条件，未提供的字段不参与过滤。"""

    def __init__(
        self,
        session_id: Optional[str] = Query(None, alias="sessionId", description="按会话 ID 过滤"),
        contact: Optional[str] = Query(None, description="按对端过滤"),
        name: Optional[str] = Query(None, description="按文件名过滤"),
        mime_type: Optional[str] = Query(None, alias="mimeType", description="按内容类型过滤"),
        status: Optional[int] = Query(None, description="按传输状态过滤"),
        direction: Optional[int] = Query(None, description="按传输方向过滤"),
    ) -> None:
        self.conditions: Dict[str, Any] = {
            key: value
            for key, value in {
                "session_id": session_id,
                "contact": contact,
                "name": name,
                "mime_type": mime_type,
                "status": status,
                "direction": direction,
            }.items()
            if value is not None
        }


def _projection(fields: Optional[str]) -> Optional[List[str]]:
    if not fields:
        return None
    return [item.strip() for item in fields.split(",") if item.strip()]


def _list(store: FileTransferStore, address, record_filter: RecordFilter, sort, fields) -> List[dict]:
    with store.read(address, record_filter.conditions, sort, _projection(fields)) as cursor:
        return cursor.all()


@router.get("", response_model=FileTransferListResponse, response_model_exclude_unset=True)
def list_file_transfers(
    record_filter: RecordFilter = Depends(),
    sort: Optional[str] = Query(None, description="排序表达式，例如 timestamp DESC"),
    fields: Optional[str] = Query(None, description="逗号分隔的返回字段"),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """返回主集合中符合条件的全部记录，不分页。"""
    items = _list(store, CollectionAddress(), record_filter, sort, fields)
    return create_response("获取文件传输记录成功", items)


@alias_router.get("", response_model=FileTransferListResponse, response_model_exclude_unset=True)
def list_file_transfers_alias(
    record_filter: RecordFilter = Depends(),
    sort: Optional[str] = Query(None, description="排序表达式，例如 timestamp DESC"),
    fields: Optional[str] = Query(None, description="逗号分隔的返回字段"),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """别名命名空间下的集合查询，结果与主集合一致。"""
    items = _list(store, AliasCollectionAddress(), record_filter, sort, fields)
    return create_response("获取文件传输记录成功", items)


@router.get("/{record_id}", response_model=FileTransferDetailResponse, response_model_exclude_unset=True)
def get_file_transfer(
    record_id: int = Path(..., ge=0, le=MAX_RECORD_ID),
    fields: Optional[str] = Query(None, description="逗号分隔的返回字段"),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """按主键返回单条记录，不存在时返回 404。"""
    item = store.read(RecordAddress(record_id), projection=_projection(fields)).first()
    if item is None:
        raise AppException("文件传输记录不存在", status.HTTP_404_NOT_FOUND)
    return create_response("获取文件传输记录成功", item)


@router.post("", response_model=FileTransferCreateResponse)
def create_file_transfer(
    payload: FileTransferFields,
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """新增一条记录，主键由服务端生成。"""
    record_id = store.create(CollectionAddress(), payload.to_fields())
    return create_response("创建文件传输记录成功", {"id": record_id, "uri": RecordAddress(record_id).uri})


@router.patch("", response_model=FileTransferMutationResponse)
def update_file_transfers(
    payload: FileTransferFields = Body(...),
    record_filter: RecordFilter = Depends(),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """批量覆盖写入符合条件的记录，返回受影响行数。"""
    count = store.update(CollectionAddress(), payload.to_fields(), record_filter.conditions)
    return create_response("更新文件传输记录成功", {"count": count})


@router.patch("/{record_id}", response_model=FileTransferMutationResponse)
def update_file_transfer(
    record_id: int = Path(..., ge=0, le=MAX_RECORD_ID),
    payload: FileTransferFields = Body(...),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """覆盖写入单条记录的部分字段；记录不存在时 count 为 0。"""
    count = store.update(RecordAddress(record_id), payload.to_fields())
    return create_response("更新文件传输记录成功", {"count": count})


@router.delete("", response_model=FileTransferMutationResponse)
def delete_file_transfers(
    record_filter: RecordFilter = Depends(),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """删除符合条件的记录；不带任何过滤条件时清空整个集合。"""
    count = store.delete(CollectionAddress(), record_filter.conditions)
    return create_response("删除文件传输记录成功", {"count": count})


@router.delete("/{record_id}", response_model=FileTransferMutationResponse)
def delete_file_transfer(
    record_id: int = Path(..., ge=0, le=MAX_RECORD_ID),
    record_filter: RecordFilter = Depends(),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """删除单条记录，可附加过滤条件（与主键同时满足才删除）。"""
    count = store.delete(RecordAddress(record_id), record_filter.conditions)
    return create_response("删除文件传输记录成功", {"count": count})


@type_router.get("", response_model=TypeDescriptorResponse)
def get_content_type(
    uri: str = Query(..., description="记录地址，例如 content://com.orangelabs.rcs.ft/ft/1"),
    store: FileTransferStore = Depends(get_store),
) -> Dict[str, Any]:
    """返回地址对应的内容类型，用于区分集合与单条记录。"""
    descriptor = store.type_of(uri)
    return create_response("获取内容类型成功", {"uri": uri, "type": descriptor})
