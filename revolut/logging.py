from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

__all__ = ["JsonFormatter", "ContextFilter", "configure_logging"]

_EXTRA_KEYS = ("service", "environment", "endpoint", "request_id", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

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


class ContextFilter(logging.Filter):
    """Stamp a fixed ``service`` label on every record passing the handler."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "service", None) is None:
            record.service = self.service_name
        return True


def configure_logging(
    fmt: str | None = None,
    *,
    service_name: Optional[str] = None,
    level: str | int | None = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Send ``revolut.*`` logs to *stream* (stdout by default) as plain text or JSON.

    Args:
        fmt: 'json' or 'text'. Defaults to LOG_FORMAT env or 'text'.
        service_name: optional service label injected into every line.
        level: defaults to LOG_LEVEL env or INFO.
        stream: where records go; the CLI passes stderr so stdout stays machine-readable.

    Only the ``revolut`` logger is touched so host applications keep control of
    the root logger.
    """
    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    level = level or os.getenv("LOG_LEVEL", "INFO").upper()

    logger = logging.getLogger("revolut")
    logger.setLevel(level)
    for h in list(logger.handlers):
        if getattr(h, "_revolut_handler", False):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler._revolut_handler = True  # type: ignore[attr-defined]
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
    if service_name:
        handler.addFilter(ContextFilter(service_name))
    logger.addHandler(handler)
    logger.propagate = False
    return handler
