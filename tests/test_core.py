"""配置与日志工具的单元测试。"""

import json
import logging

import pytest

from ftprovider.core.config import BASE_DIR, Settings
from ftprovider.core.logger import (
    NOTIFIER_LOGGER,
    SQL_LOGGER,
    JsonFormatter,
    RequestIdFilter,
    build_logging_config,
    reset_request_id,
    set_request_id,
    setup_logging,
)


def test_default_database_url_points_to_local_file():
    settings = Settings(DATABASE_URL="")
    assert settings.sql_database_url == f"sqlite:///{BASE_DIR / settings.database_file_name}"


def test_explicit_database_url_wins():
    settings = Settings(DATABASE_URL="sqlite:///tmp/other.db")
    assert settings.sql_database_url == "sqlite:///tmp/other.db"


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("ftprovider", logging.INFO, __file__, 1, "hello %s", ("ft",), None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_request_id():
    record = _record()
    token = set_request_id("req-1")
    try:
        assert RequestIdFilter().filter(record) is True
    finally:
        reset_request_id(token)

    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "hello ft"
    assert payload["request_id"] == "req-1"
    assert payload["level"] == "INFO"
    assert "address" not in payload


def test_json_formatter_outside_request_and_with_address():
    record = _record(address="content://com.orangelabs.rcs.ft/ft/7")
    RequestIdFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_id"] is None
    assert payload["address"] == "content://com.orangelabs.rcs.ft/ft/7"


@pytest.mark.parametrize("echo, level", [(True, "INFO"), (False, "WARNING")])
def test_database_echo_controls_sql_logger(tmp_path, echo, level):
    settings = Settings(DATABASE_ECHO=echo, LOG_DIR=str(tmp_path))
    config = build_logging_config(settings)

    assert config["loggers"][SQL_LOGGER]["level"] == level
    assert config["loggers"][SQL_LOGGER]["propagate"] is False


def test_notifier_logger_has_its_own_level(tmp_path):
    settings = Settings(LOG_LEVEL="WARNING", LOG_NOTIFIER_LEVEL="DEBUG", LOG_DIR=str(tmp_path))
    config = build_logging_config(settings)

    assert config["loggers"]["ftprovider"]["level"] == "WARNING"
    assert config["loggers"][NOTIFIER_LOGGER] == {"level": "DEBUG", "propagate": True}


def test_setup_logging_applies_levels(tmp_path):
    try:
        setup_logging(Settings(DATABASE_ECHO=True, LOG_NOTIFIER_LEVEL="ERROR", LOG_DIR=str(tmp_path)))
        assert logging.getLogger(SQL_LOGGER).level == logging.INFO
        assert logging.getLogger(NOTIFIER_LOGGER).level == logging.ERROR
        assert tmp_path.is_dir()
    finally:
        setup_logging(Settings(LOG_DIR=str(tmp_path)))
    assert logging.getLogger(SQL_LOGGER).level == logging.WARNING
