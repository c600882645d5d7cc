"""日志配置模块：统一服务日志的格式、级别与请求上下文。

除应用自身的 ``ftprovider`` 日志器外，这里还接管两类日志：

* ``sqlalchemy.engine``：``DATABASE_ECHO`` 打开时输出 SQL 语句；
* ``ftprovider.services.notifier``：变更通知，级别由 ``LOG_NOTIFIER_LEVEL`` 单独控制。
"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar, Token
from datetime import datetime
from typing import Any, Dict, Optional

from .config import Settings, get_settings

NOTIFIER_LOGGER = "ftprovider.services.notifier"
SQL_LOGGER = "sqlalchemy.engine"

_NO_REQUEST = "-"
_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class _TZFormatter(logging.Formatter):
    """按 ``Settings.timezone`` 渲染时间，未指定 datefmt 时输出毫秒级 ISO-8601。"""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: D401
        dt = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(sep=" ", timespec="milliseconds")


class ColorFormatter(_TZFormatter):
    """终端彩色输出，仅给级别字段上色；带 ``address`` 的记录在末尾附上地址。"""

    RESET = "\033[0m"
    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def __init__(self, fmt: str = _TEXT_FORMAT, datefmt: Optional[str] = None, use_colors: Optional[bool] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(record.levelno) if self.use_colors else None
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = levelname

        address = getattr(record, "address", None)
        if address:
            message = f"{message} <{address}>"
        return message


class JsonFormatter(_TZFormatter):
    """每条日志一行 JSON，便于日志平台检索请求 id 与记录地址。"""

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", None)
        payload: Dict[str, Any] = {
            "ts": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
            "request_id": None if request_id == _NO_REQUEST else request_id,
        }
        address = getattr(record, "address", None)
        if address:
            payload["address"] = address
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    """把当前请求 id 写入日志记录；请求之外的日志记为 ``-``。"""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = _request_id_ctx.get() or _NO_REQUEST
        return True


def set_request_id(request_id: Optional[str]) -> Token:
    """设置当前上下文的请求 id，返回的 token 交给 ``reset_request_id`` 恢复。"""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id_ctx.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id_ctx.get()


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """根据配置生成 ``dictConfig`` 字典，不产生任何副作用。"""
    formatter = "json" if settings.log_json else "console"
    handlers = ["console", "file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": "ftprovider.core.logger.RequestIdFilter"},
        },
        "formatters": {
            "console": {"()": "ftprovider.core.logger.ColorFormatter"},
            "file": {"()": "ftprovider.core.logger.ColorFormatter", "use_colors": False},
            "json": {"()": "ftprovider.core.logger.JsonFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": "json" if settings.log_json else "file",
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
                "filters": ["request_id"],
            },
        },
        "loggers": {
            "ftprovider": {
                "handlers": handlers,
                "level": settings.log_level,
                "propagate": False,
            },
            # 交给 ftprovider 的 handler 输出，只单独设置级别
            NOTIFIER_LOGGER: {
                "level": settings.log_notifier_level,
                "propagate": True,
            },
            # SQLAlchemy 的 echo 本质上就是这个日志器的 INFO 级别
            SQL_LOGGER: {
                "handlers": handlers,
                "level": "INFO" if settings.database_echo else "WARNING",
                "propagate": False,
            },
            "uvicorn": {
                "handlers": handlers,
                "level": settings.log_level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": handlers,
            "level": "WARNING",
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """初始化日志系统；测试可以传入独立的 ``Settings``。"""
    settings = settings or get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(settings))


logger = logging.getLogger("ftprovider")
