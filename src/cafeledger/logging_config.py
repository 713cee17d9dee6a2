"""Structured logging: readable console output plus a rotating JSON log file.

Records emitted while a request is being handled carry a ``request`` block
(method, path, endpoint and the session's role) so that writes, permission
refusals and backend failures can be traced back to who triggered them.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path

from flask import g, has_request_context, request

from .config import BaseConfig

ROOT_LOGGER_NAME = "cafeledger"
LOG_FILENAME = "cafeledger.log"

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "request",
}


class RequestContextFilter(logging.Filter):
    """Attach the current request and session role to records logged inside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context() and not hasattr(record, "request"):
            state = g.get("state")
            record.request = {
                "method": request.method,
                "path": request.path,
                "endpoint": request.endpoint,
                "role": getattr(state, "role", None),
            }
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are grouped under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_info = getattr(record, "request", None)
        if request_info:
            entry["request"] = request_info

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def _console_handler(config: BaseConfig) -> logging.Handler:
    handler = logging.StreamHandler()
    if config.DEV_MODE:
        handler.setLevel(logging.INFO)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S")
        )
    else:
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(config: BaseConfig) -> logging.Logger:
    """Attach console and JSON file handlers to the ``cafeledger`` logger.

    Calling it again (a second app in the same process) replaces the handlers
    instead of stacking them.
    """

    logs_dir = Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / LOG_FILENAME

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.INFO)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    context_filter = RequestContextFilter()
    for handler in (_console_handler(config), _file_handler(log_file)):
        handler.addFilter(context_filter)
        package_logger.addHandler(handler)

    package_logger.info(
        "Logging initialized",
        extra={
            "dev_mode": config.DEV_MODE,
            "log_file": str(log_file),
            "storage_backend": config.STORAGE_BACKEND,
            "settings_store": config.SETTINGS_STORE,
        },
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, e.g. ``get_logger("web")`` -> ``cafeledger.web``."""

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = ["JSONFormatter", "RequestContextFilter", "get_logger", "setup_logging"]
