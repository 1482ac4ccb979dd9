from __future__ import annotations
"""Structured logging utilities.

Logs go to stderr so they never interleave with the command output printed on
stdout. Every call site passes an `event` key through `extra`.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO


_RESERVED_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _record_extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_KEYS and not key.startswith("_")
    }


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, including every `extra` field."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_record_extras(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class KeyValueLogFormatter(logging.Formatter):
    """Human-oriented `LEVEL message key=value ...` lines."""

    def format(self, record: logging.LogRecord) -> str:
        fields = " ".join(f"{key}={value}" for key, value in _record_extras(record).items())
        line = f"{record.levelname:<7} {record.getMessage()}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "WARNING", log_format: str = "json", stream: TextIO | None = None) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name (`DEBUG`, `INFO`, `WARNING`, ...).
        log_format: `json` for structured output, `text` for key=value lines.
        stream: Target stream, stderr by default.
    """
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueLogFormatter() if log_format == "text" else JsonLogFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())
