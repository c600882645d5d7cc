"""请求 id 中间件：为每个 HTTP 请求绑定日志上下文，并在响应头中回传。

客户端提供合法的 ``X-Request-ID`` 时沿用，否则生成新的 id；请求结束后恢复
原来的上下文，避免后台任务的日志串到上一个请求上。
"""

from __future__ import annotations

import uuid
from typing import Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ftprovider.core.logger import reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_LENGTH = 128


def _accepted(value: Optional[str]) -> Optional[str]:
    if not value or len(value) > _MAX_LENGTH or not value.isprintable():
        return None
    return value


class RequestIdMiddleware:
    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _accepted(Headers(scope=scope).get(self.header_name)) or uuid.uuid4().hex

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[self.header_name] = request_id
            await send(message)

        token = set_request_id(request_id)
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            reset_request_id(token)
