"""Logging helpers."""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import Any

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}

_TOKEN_PATTERN = re.compile(r"(access_token=)[^&\s]+")
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def redact_token(text: str) -> str:
    """Mask ``access_token`` query values so tokens never reach the logs."""
    return _TOKEN_PATTERN.sub(r"\1***", text)


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_token(record.getMessage()),
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = redact_token(self.formatException(record.exc_info))

        return json.dumps(data, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable formatter that still masks access tokens."""

    def __init__(self) -> None:
        super().__init__(_PLAIN_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        return redact_token(super().format(record))


def configure_logging(
    *,
    level: int = logging.INFO,
    structured: bool | None = None,
) -> None:
    """Configure root logging with optional JSON output."""

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        if structured is None:
            return
        formatter: logging.Formatter = JsonFormatter() if structured else PlainFormatter()
        for handler in root.handlers:
            handler.setFormatter(formatter)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if structured else PlainFormatter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter", "PlainFormatter", "redact_token"]
