"""JSON-lines logging for the daemon.

Each record becomes one line on stdout. The fields that describe a publish cycle
(`outcome`, `report_date`, `url`, ...) are lifted to the top level so an operator can
filter daemon output with plain `jq` selectors; any other `extra=` values are grouped
under `context`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, date, datetime
from typing import IO, Any

SERVICE_NAME = "daily-report-bot"

CYCLE_FIELDS: tuple[str, ...] = ("outcome", "report_date", "url", "repo", "issue_number")

# Attributes every LogRecord carries; anything else on a record came from `extra=`.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class JsonLineFormatter(logging.Formatter):
    """Render a record as `{ts, level, service, logger, message, <cycle fields>, context}`."""

    def __init__(self, *, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self._service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "service": self._service,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                continue
            if key in CYCLE_FIELDS:
                payload[key] = _jsonable(value)
            else:
                context[key] = _jsonable(value)
        if context:
            payload["context"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: IO[str] | None = None) -> None:
    """Send all logging through a single JSON-lines handler (stdout by default)."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonLineFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # HTTP client chatter (connection pool, PyGithub requests) stays at INFO or above.
    for noisy in ("urllib3", "github"):
        logging.getLogger(noisy).setLevel(max(root.level, logging.INFO))
