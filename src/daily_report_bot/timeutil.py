"""Timezone and calendar-day helpers."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

CHINA_TIMEZONE_NAME = "Asia/Shanghai"

# Mainland China has not observed DST since 1991, so a fixed offset is exact.
UTC_PLUS_8 = timezone(timedelta(hours=8), "UTC+08:00")

_MILLISECOND_THRESHOLD = 1_000_000_000_000
_MAX_OFFSET_X10 = 140


def load_timezone(name: str, *, fallback: tzinfo = UTC_PLUS_8) -> tzinfo:
    """Return the IANA zone called `name`, or `fallback` if it cannot be loaded."""

    if not name.strip():
        return fallback
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown timezone; using fixed offset fallback",
            extra={"timezone": name, "fallback": str(fallback)},
        )
        return fallback


def china_timezone() -> tzinfo:
    return load_timezone(CHINA_TIMEZONE_NAME)


def is_weekend(day: date) -> bool:
    """True for Saturday and Sunday."""

    return day.weekday() >= 5


def start_of_day_by_offset_x10(timestamp: int, offset_x10: int) -> int:
    """Return the Unix timestamp (seconds) of local midnight in a fixed UTC offset.

    The offset is given as hours multiplied by ten, so a tenth of an hour is six
    minutes: UTC+8 => 80, UTC+5:30 => 55, UTC-3:30 => -35.

    Args:
        timestamp: Unix timestamp in seconds or milliseconds. Values above 1e12 are
            treated as milliseconds.
        offset_x10: UTC offset in tenths of an hour, within [-140, 140].

    Raises:
        ValueError: If the offset is out of range.
    """

    if offset_x10 < -_MAX_OFFSET_X10 or offset_x10 > _MAX_OFFSET_X10:
        raise ValueError(
            f"invalid utc offset x10: {offset_x10} (must be between -140 and 140)"
        )

    if timestamp > _MILLISECOND_THRESHOLD:
        timestamp = timestamp // 1000

    sign = -1 if offset_x10 < 0 else 1
    hours, tenths = divmod(abs(offset_x10), 10)
    minutes = tenths * 6
    name = f"UTC{'-' if sign < 0 else '+'}{hours:02d}:{minutes:02d}"
    zone = timezone(sign * timedelta(hours=hours, minutes=minutes), name)

    local = datetime.fromtimestamp(timestamp, tz=zone)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp())
