"""异常处理模块：定义存储层的错误分类，以及 HTTP 层的统一响应格式。"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ProviderError(Exception):
    """文件传输记录存储抛出的所有业务异常的基类。"""


class UnknownTarget(ProviderError):
    """读取或类型查询时遇到无法识别的地址。"""

    def __init__(self, target: object) -> None:
        super().__init__(f"Unknown URI {target}")
        self.target = target


class UnsupportedTarget(ProviderError):
    """写操作（新增、更新、删除）作用于无法识别或只读的地址。"""

    def __init__(self, target: object, operation: str) -> None:
        super().__init__(f"Cannot {operation} URI {target}")
        self.target = target
        self.operation = operation


class ConstraintError(ProviderError):
    """存储层唯一性或类型约束冲突，原始异常通过 ``__cause__`` 保留。"""


class InvalidFieldError(ProviderError, ValueError):
    """字段名未知、试图写入主键或排序表达式非法。"""


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


_ERROR_STATUS = (
    (UnknownTarget, status.HTTP_404_NOT_FOUND),
    (UnsupportedTarget, status.HTTP_405_METHOD_NOT_ALLOWED),
    (ConstraintError, status.HTTP_409_CONFLICT),
    (InvalidFieldError, status.HTTP_400_BAD_REQUEST),
)


def to_app_exception(exc: ProviderError) -> AppException:
    """把存储层异常映射为带状态码的 ``AppException``。"""
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return AppException(str(exc), code)
    return AppException(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    payload = {"msg": exc.detail, "data": getattr(exc, "data", None), "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=payload)


async def provider_exception_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """未在路由内转换的存储层异常，按错误分类输出统一结构。"""
    return await http_exception_handler(request, to_app_exception(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：将未捕获异常转换为标准的 500 响应结构。"""
    payload = {
        "msg": "Internal server error",
        "data": None,
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
