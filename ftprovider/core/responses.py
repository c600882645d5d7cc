"""响应封装：构建系统统一的返回结构。"""

from typing import Any

from fastapi import status


def create_response(msg: str, data: Any = None, code: int = status.HTTP_200_OK) -> dict[str, Any]:
    """按照 ``msg``、``data``、``code`` 组合出统一响应体。"""
    return {"msg": msg, "data": data, "code": code}
