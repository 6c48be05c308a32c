from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

__all__ = ["JsonFormatter", "configure_logging", "resolve_level"]

# Extra attributes copied from log records into JSON output.
_EXTRA_KEYS = ("service", "operation", "error_kind", "status", "environment")

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        return json.dumps(payload, separators=(",", ":"), default=str)


class _ServiceFilter(logging.Filter):
    def __init__(self, service: str) -> None:
        super().__init__()
        self._service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "service", None) is None:
            record.service = self._service
        return True


def resolve_level(level: str | int | None) -> int:
    """Map ``error``/``warn``/``info``/``debug`` (or a logging int) to a level."""

    if isinstance(level, int):
        return level
    name = (level or "info").strip().lower()
    if name not in _LEVELS:
        raise ValueError(f"Unsupported log level: {level!r}")
    return _LEVELS[name]


def configure_logging(
    level: str | int | None = None,
    fmt: str | None = None,
    *,
    service_name: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure the root logger with plain text or JSON output.

    Output goes to stderr by default: stdout carries the MCP stdio protocol
    and must only ever contain protocol frames.

    Args:
        level: 'error', 'warn', 'info' or 'debug'. Defaults to LOG_LEVEL env or 'info'.
        fmt: 'json' or 'text'. Defaults to LOG_FORMAT env or 'text'.
        service_name: optional service label added to every record.
        stream: override the output stream (tests).
    """

    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    root = logging.getLogger()
    root.setLevel(resolve_level(level or os.getenv("LOG_LEVEL", "info")))

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
    if service_name:
        handler.addFilter(_ServiceFilter(service_name))
    root.addHandler(handler)

    # httpx logs every request line at INFO, including full URLs.
    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
