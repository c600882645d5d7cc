"""依赖注入模块：封装 FastAPI 路由复用的依赖函数。"""

from fastapi import Request

from ftprovider.services.file_transfer_store import FileTransferStore


def get_store(request: Request) -> FileTransferStore:
    """返回应用启动时创建的记录存储对象。"""
    return request.app.state.store
