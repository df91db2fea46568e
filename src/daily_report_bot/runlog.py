"""Append-only run log: one plain-text line per cycle outcome."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class RunLog:
    """Writes `TAG <timestamp>: <detail>` lines to a local file.

    Appending is fire-and-forget: failures are logged and reported through the return
    value, never raised, so a broken log file cannot fail a cycle.
    """

    def __init__(self, path: Path | None) -> None:
        # An empty path disables the run log.
        self._path = path if path is not None and path != Path("") else None

    @property
    def path(self) -> Path | None:
        return self._path

    @staticmethod
    def format_line(tag: str, detail: str, when: datetime) -> str:
        return f"{tag} {when.isoformat(timespec='seconds')}: {detail}\n"

    def append(self, tag: str, detail: str, *, when: datetime) -> bool:
        if self._path is None:
            return False

        line = self.format_line(tag, detail, when)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError:
            logger.warning(
                "Failed to append run log", extra={"path": str(self._path)}, exc_info=True
            )
            return False
        return True
