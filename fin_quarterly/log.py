"""
fin_quarterly/log.py
====================
JSON logging for the import tooling.

    configure_logging()
    log = get_logger(__name__)
    log.warning("failed to save quarter record", extra={"extra": {"company": "SBER"}})
"""
from __future__ import annotations
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

__all__ = ["configure_logging", "get_logger"]


class JsonFormatter(logging.Formatter):
    """One JSON object per line with stable keys: ts, level, logger, message."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Install the JSON handler on the root logger. Safe to call repeatedly."""
    root = logging.getLogger()
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for h in root.handlers:
        if isinstance(h.formatter, JsonFormatter):
            if isinstance(h, logging.StreamHandler) and h.stream is not sys.stderr:
                h.setStream(sys.stderr)
            return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
