"""Structured logging for label sync runs.

Every line is one JSON object. The fields that say which label change a line is
about (`owner`, `repository`, `label`, `action`) are lifted to the top level so
a run can be filtered per repository or per label with plain `jq`; any other
`extra=` context is nested under `extra`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CONTEXT_FIELDS: tuple[str, ...] = ("owner", "repository", "label", "action")

_RESERVED_LOG_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def normalize_level(value: object) -> object:
    """Uppercase a level name so `info` and `INFO` validate the same way."""

    if isinstance(value, str):
        return value.strip().upper()
    return value


class JsonFormatter(logging.Formatter):
    """Format records as JSON with label-change context at the top level."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_ATTRS or key.startswith("_"):
                continue
            if key in CONTEXT_FIELDS:
                payload[key] = value
            else:
                extra[key] = value
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: LogLevel) -> None:
    """Send JSON log lines to stdout at `level`, replacing existing root handlers."""

    root = logging.getLogger()

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level)

    # PyGithub and its transport get chatty at DEBUG.
    for name in ("github", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
