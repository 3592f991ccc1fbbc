"""Structured logging configuration.

Uses standard library logging with a JSON formatter. Workflow progress,
mismatches and control-channel events are emitted with `extra=` context so a
test run's log can be filtered by field.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }
        if context:
            payload["extra"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Payloads are arbitrary JSON, but `extra` may still carry non-JSON objects.
        return json.dumps(payload, ensure_ascii=False, default=repr)


def configure_logging(level: str) -> None:
    """Configure root logging with structured JSON output."""

    root = logging.getLogger()

    # Re-configuring (e.g. `serve` after settings load) must not duplicate output.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())

    # Keep third-party loggers quieter than workflow progress.
    logging.getLogger("uvicorn.access").setLevel(max(root.level, logging.WARNING))
    logging.getLogger("websockets").setLevel(max(root.level, logging.INFO))
