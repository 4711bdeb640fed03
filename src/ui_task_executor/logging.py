"""Structured logging for runs.

Each record is one JSON object. Run-correlation fields passed through
`extra` (`run_id`, `task_index`) are lifted to the top level so a run's
lines can be filtered without parsing nested data; everything else in
`extra` is copied with the same live-handle redaction as run dumps.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from ui_task_executor.executor.dump import redact_live_handles

# Attributes every LogRecord carries; anything else arrived through `extra`.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

CORRELATION_FIELDS: tuple[str, ...] = ("run_id", "task_index")


class JsonFormatter(logging.Formatter):
    """Formats records as single-line JSON with redacted extras."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }
        for key in CORRELATION_FIELDS:
            if key in extra:
                payload[key] = redact_live_handles(extra.pop(key))
        if extra:
            payload["extra"] = redact_live_handles(extra)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str, stream: TextIO | None = None) -> None:
    """Send all logging to `stream` (stdout by default) as JSON lines."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # asyncio reports slow callbacks at DEBUG; executors awaiting the UI trigger it constantly.
    logging.getLogger("asyncio").setLevel(max(root.level, logging.WARNING))
