"""Daily wall-clock scheduler.

Runs a callable once per day at a fixed local time. Cycles run strictly one after the
other: the next trigger is computed only after the previous cycle has returned, so a
cycle that overruns past the trigger time is followed by tomorrow's run, not a catch-up.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime, time as dt_time, timedelta, tzinfo
from typing import TypeVar

from daily_report_bot.timeutil import china_timezone

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DailyScheduler:
    """Owns the next trigger instant and runs a cycle function when it is reached."""

    def __init__(
        self,
        *,
        hour: int = 10,
        minute: int = 0,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._at = dt_time(hour=hour, minute=minute)
        self._tz = tz or china_timezone()
        self._clock = clock
        self._sleep = sleep
        self.next_trigger: datetime | None = None

    def compute_next_trigger(self, now: datetime) -> datetime:
        """Return today's trigger time if still ahead of `now`, otherwise tomorrow's."""

        local_now = now.astimezone(self._tz)
        target = datetime.combine(local_now.date(), self._at, tzinfo=self._tz)
        if local_now >= target:
            tomorrow = local_now.date() + timedelta(days=1)
            target = datetime.combine(tomorrow, self._at, tzinfo=self._tz)
        return target

    def wait_and_run(self, cycle_fn: Callable[[], T]) -> T | None:
        """Sleep until the next trigger, then run `cycle_fn`.

        Exceptions from `cycle_fn` are logged and swallowed; None is returned for them.
        """

        self.next_trigger = self.compute_next_trigger(self._clock())
        delay = (self.next_trigger - self._clock()).total_seconds()
        logger.info(
            "Waiting for next scheduled run",
            extra={"next_run": self.next_trigger.isoformat(), "sleep_seconds": round(delay, 3)},
        )
        if delay > 0:
            self._sleep(delay)

        try:
            return cycle_fn()
        except Exception:
            logger.exception("Scheduled run failed")
            return None

    def run_forever(self, cycle_fn: Callable[[], object], *, max_runs: int | None = None) -> int:
        """Repeat :meth:`wait_and_run`; stop after `max_runs` runs if given.

        Returns:
            Number of runs performed.
        """

        runs = 0
        while max_runs is None or runs < max_runs:
            self.wait_and_run(cycle_fn)
            runs += 1
        return runs
