"""Structured logging configuration.

Uses standard library logging with a JSON formatter.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

_RESERVED_LOG_RECORD_ATTRS: Set[str] = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for logging records."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging with structured JSON output.

    Args:
        level: Log level name; defaults to ``FLOWBRIDGE_LOG_LEVEL`` or INFO
    """
    from flowbridge.utils.config import get_log_level

    root = logging.getLogger()

    # Remove existing handlers so re-configuring does not duplicate output
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel((level or get_log_level()).upper())

    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
