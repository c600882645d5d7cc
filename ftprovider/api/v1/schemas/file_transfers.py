"""文件传输记录相关的请求与响应模型。"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ftprovider.api.v1.schemas.common import ResponseEnvelope


class FileTransferFields(BaseModel):
    """可写字段；请求体同时接受下划线与驼峰两种写法，未提供的字段不会写入。"""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    session_id: Optional[str] = Field(default=None, alias="sessionId", description="所属会话 ID")
    contact: Optional[str] = Field(default=None, description="对端标识")
    name: Optional[str] = Field(default=None, description="文件名")
    mime_type: Optional[str] = Field(default=None, alias="mimeType", description="内容类型")
    status: Optional[int] = Field(default=None, description="传输状态")
    direction: Optional[int] = Field(default=None, description="传输方向")
    timestamp: Optional[int] = Field(default=None, description="事件时间（毫秒）")
    size: Optional[int] = Field(default=None, ge=0, description="已传输字节数")
    total_size: Optional[int] = Field(default=None, alias="totalSize", ge=0, description="总字节数")

    def to_fields(self) -> dict:
        return self.model_dump(exclude_unset=True)


class FileTransferItem(BaseModel):
    id: Optional[int] = None
    session_id: Optional[str] = None
    contact: Optional[str] = None
    name: Optional[str] = None
    mime_type: Optional[str] = None
    status: Optional[int] = None
    direction: Optional[int] = None
    timestamp: Optional[int] = None
    size: Optional[int] = None
    total_size: Optional[int] = None


class CreatedRecord(BaseModel):
    id: int
    uri: str


class AffectedRows(BaseModel):
    count: int


class TypeDescriptor(BaseModel):
    uri: str
    type: str


FileTransferListResponse = ResponseEnvelope[List[FileTransferItem]]
FileTransferDetailResponse = ResponseEnvelope[FileTransferItem]
FileTransferCreateResponse = ResponseEnvelope[CreatedRecord]
FileTransferMutationResponse = ResponseEnvelope[AffectedRows]
TypeDescriptorResponse = ResponseEnvelope[TypeDescriptor]
