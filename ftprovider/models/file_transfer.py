"""文件传输记录模型：每次文件传输尝试对应 ``ft`` 表中的一行。

Python 属性使用下划线命名，数据库列名保持 ``sessionId``/``mimeType``/
``totalSize`` 等原始写法。除主键外所有列都允许为空，存储层不做默认值填充。
"""

from typing import Optional

from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ftprovider.models.base import Base

TABLE_NAME = "ft"


class FileTransfer(Base):
    __tablename__ = TABLE_NAME

    # 主键由存储对象生成，不使用自增
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=False)
    session_id: Mapped[Optional[str]] = mapped_column("sessionId", Text, nullable=True)
    contact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column("mimeType", Text, nullable=True)
    status: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    direction: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # 事件时间，毫秒级 epoch
    timestamp: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    total_size: Mapped[Optional[int]] = mapped_column("totalSize", BigInteger, nullable=True)


# 对外字段名（Python 属性名）与数据库列名的映射，按表定义顺序排列
FIELD_COLUMNS = {
    "id": "id",
    "session_id": "sessionId",
    "contact": "contact",
    "name": "name",
    "mime_type": "mimeType",
    "status": "status",
    "direction": "direction",
    "timestamp": "timestamp",
    "size": "size",
    "total_size": "totalSize",
}
