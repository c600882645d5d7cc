"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from ftprovider.models.base import Base
from ftprovider.models.file_transfer import FIELD_COLUMNS, FileTransfer

__all__ = ["Base", "FileTransfer", "FIELD_COLUMNS"]
