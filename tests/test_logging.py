"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest
from flask import g

from cafeledger.config import BaseConfig
from cafeledger.context import SessionState
from cafeledger.logging_config import JSONFormatter, RequestContextFilter, get_logger, setup_logging


@pytest.fixture
def config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> BaseConfig:
    monkeypatch.setenv("CAFELEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CAFELEDGER_STORAGE_BACKEND", "sqlmodel")
    monkeypatch.setenv("CAFELEDGER_DEV_MODE", "true")
    return BaseConfig()


def _record(**kwargs) -> logging.LogRecord:
    defaults = dict(
        name="test.logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=42,
        msg="Test message",
        args=(),
        exc_info=None,
    )
    defaults.update(kwargs)
    record = logging.LogRecord(**defaults)
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter emits the standard fields."""

    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.transaction_id = "abc"
    record.role = "admin"

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"transaction_id": "abc", "role": "admin"}


def test_setup_logging(config, tmp_path):
    """Logging setup attaches console + rotating JSON file handlers."""

    logger = setup_logging(config)

    assert logger.name == "cafeledger"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "cafeledger.log"
    assert log_file.exists()

    get_logger("ledger").warning("Drawer short", extra={"difference": 120.5})
    for handler in logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    assert lines[0]["message"] == "Logging initialized"
    assert lines[-1]["logger"] == "cafeledger.ledger"
    assert lines[-1]["extra"] == {"difference": 120.5}


def test_setup_logging_is_idempotent(config):
    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "cafeledger.module1"
    assert logger2.name == "cafeledger.module2"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(config, dev_mode):
    """Console logging level adjusts based on dev mode."""

    config.DEV_MODE = dev_mode
    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )

    assert console_handler.level == (logging.INFO if dev_mode else logging.WARNING)


def test_records_inside_a_request_carry_request_context(app):
    record = _record()
    with app.test_request_context("/transactions", method="POST"):
        g.state = SessionState(role="moderator")
        assert RequestContextFilter().filter(record)

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["request"] == {
        "method": "POST",
        "path": "/transactions",
        "endpoint": "cashbook.create_transaction",
        "role": "moderator",
    }
    assert "extra" not in log_data


def test_records_outside_a_request_have_no_request_block():
    record = _record()

    RequestContextFilter().filter(record)

    assert "request" not in json.loads(JSONFormatter().format(record))
