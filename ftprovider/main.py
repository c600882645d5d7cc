"""应用入口：负责创建 FastAPI 实例并绑定记录存储的生命周期。"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ftprovider.api.v1 import api_router
from ftprovider.core.config import get_settings
from ftprovider.core.exceptions import (
    ProviderError,
    generic_exception_handler,
    http_exception_handler,
    provider_exception_handler,
)
from ftprovider.core.logger import logger, setup_logging
from ftprovider.core.responses import create_response
from ftprovider.middleware.request_id import RequestIdMiddleware
from ftprovider.services.file_transfer_store import FileTransferStore


def create_app(store: Optional[FileTransferStore] = None) -> FastAPI:
    """构建应用；``store`` 为空时在启动阶段按配置创建。"""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """启动时打开记录存储，退出时关闭；存储对象在两次启动之间可以复用。"""
        if app.state.store is None:
            app.state.store = FileTransferStore()
        app.state.store.open()
        logger.info("SUCCESS - Application running at http://127.0.0.1:%s", settings.app_port)
        try:
            yield
        finally:
            app.state.store.close()

    app = FastAPI(title=settings.project_name, debug=settings.debug, lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)
    app.state.store = store

    @app.exception_handler(HTTPException)
    async def custom_http_exception_handler(request, exc):  # pragma: no cover - framework glue
        return await http_exception_handler(request, exc)

    @app.exception_handler(ProviderError)
    async def custom_provider_exception_handler(request, exc):
        """存储层异常按错误分类转换为 404/405/409/400。"""
        return await provider_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def custom_generic_exception_handler(request, exc):  # pragma: no cover - framework glue
        logger.exception("Unhandled error on %s", request.url.path)
        return await generic_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """统一处理请求体验证失败的场景。"""

        def _serialize(obj: Any) -> Any:
            if isinstance(obj, Exception):
                return str(obj)
            if isinstance(obj, dict):
                return {key: _serialize(value) for key, value in obj.items()}
            if isinstance(obj, (list, tuple)):
                return [_serialize(item) for item in obj]
            return obj

        serialized_errors = _serialize(exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=create_response("请求参数验证失败", serialized_errors, status.HTTP_422_UNPROCESSABLE_ENTITY),
        )

    @app.get("/health")
    def health_check() -> dict:
        """提供健康检查接口，便于编排器与监控系统探活。"""
        return create_response("OK", {"status": "healthy"})

    app.include_router(api_router, prefix=settings.api_v1_str)
    return app


setup_logging()
app = create_app()
