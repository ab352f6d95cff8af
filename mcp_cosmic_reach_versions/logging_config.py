"""Centralized logging configuration.

- Logs go to stderr only; stdout belongs to the stdio transport
- configure_logging() can be called repeatedly without duplicating handlers
- Human-readable lines by default, one JSON object per line on request
- httpx/httpcore are kept at WARNING unless DEBUG is requested
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

_HANDLER_NAME = "cosmic_reach_versions_stderr"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_NOISY_LOGGERS = ("httpx", "httpcore")

# Attributes every LogRecord has; anything else came in through extra=
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class _JsonFormatter(logging.Formatter):
    """One-line JSON: timestamp, level, logger, message, plus any extra fields."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name or "root",
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return _JsonFormatter()
    return logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_DATE_FORMAT)


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure application-wide logging.

    Parameters
    ----------
    log_level: str
        Root log level name; unknown names fall back to INFO.
    json_logs: bool
        If True, emit one-line JSON per record.
    """

    level = logging.getLevelName((log_level or "").upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.name == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.name = _HANDLER_NAME
        # stdout must stay clean
        root.handlers = [
            h
            for h in root.handlers
            if not (isinstance(h, logging.StreamHandler) and h.stream is sys.stdout)
        ]
        root.addHandler(handler)
    handler.setFormatter(_build_formatter(json_logs))
    root.setLevel(level)

    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


__all__ = ["configure_logging"]
