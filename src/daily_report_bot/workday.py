"""Mainland China workday resolution.

The public holiday calendar (timor.tech by default) is authoritative when reachable: it
knows about public holidays and the compensatory working weekends around them. When a
lookup fails the callers fall back to a plain Monday-Friday check.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import date, timedelta
from enum import Enum

import requests
from pydantic import BaseModel, ValidationError

from daily_report_bot.timeutil import is_weekend

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://timor.tech/api/holiday/info/{date}"
DATE_PLACEHOLDER = "{date}"

REQUEST_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0 (compatible; DailyIssueBot/1.0; +https://github.com)",
    "Referer": "https://timor.tech/",
}

MAX_LOOKBACK_DAYS = 31


class WorkdayLookupError(RuntimeError):
    """Raised when the holiday calendar cannot classify a date."""


class WorkdayStatus(str, Enum):
    WORKDAY = "workday"
    NON_WORKDAY = "non_workday"
    UNKNOWN = "unknown"


class HolidayType(BaseModel):
    # 0 workday, 1 weekend, 2 holiday, 3 compensatory shift. Only 0 counts as a workday.
    type: int
    name: str = ""


class HolidayDetail(BaseModel):
    holiday: bool = False
    name: str = ""
    wage: int = 0
    date: str = ""


class HolidayInfoResponse(BaseModel):
    """Payload of `GET /api/holiday/info/{date}`."""

    # A payload without `code` is treated as a successful answer.
    code: int = 0
    type: HolidayType | None = None
    holiday: HolidayDetail | None = None


class WorkdayResolver:
    """Classify dates against the China work calendar and find previous workdays."""

    def __init__(
        self,
        *,
        endpoint: str = "",
        session: requests.Session | None = None,
        timeout: float = 8.0,
        max_attempts: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._endpoint = endpoint.strip() or DEFAULT_ENDPOINT
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._sleep = sleep

    def endpoint_for(self, day: date) -> str:
        return self._endpoint.replace(DATE_PLACEHOLDER, day.isoformat())

    def _fetch(self, url: str) -> requests.Response:
        last = self._max_attempts - 1
        for attempt in range(self._max_attempts):
            try:
                resp = self._session.get(url, headers=REQUEST_HEADERS, timeout=self._timeout)
            except requests.RequestException as e:
                if attempt < last:
                    self._sleep(0.3 * (attempt + 1))
                    continue
                raise WorkdayLookupError(f"holiday api request failed: {e}") from e

            if resp.status_code == 200:
                return resp

            if resp.status_code in {403, 429} and attempt < last:
                # Rate limited: back off a little longer than for network errors.
                resp.close()
                self._sleep(0.5 * (attempt + 1))
                continue

            resp.close()
            raise WorkdayLookupError(f"holiday api status: {resp.status_code}")

        # Unreachable: the final attempt either returns or raises.
        raise WorkdayLookupError("holiday api retries exhausted")

    def is_workday(self, day: date) -> bool:
        """Return whether `day` is a mainland China workday.

        Raises:
            WorkdayLookupError: If the calendar is unreachable or its answer is unknown.
        """

        url = self.endpoint_for(day)
        logger.debug("Querying holiday calendar", extra={"endpoint": url})

        resp = self._fetch(url)
        try:
            payload = resp.json()
        except ValueError as e:
            raise WorkdayLookupError("holiday api returned invalid JSON") from e
        finally:
            resp.close()

        try:
            info = HolidayInfoResponse.model_validate(payload)
        except ValidationError as e:
            raise WorkdayLookupError("holiday api returned unexpected payload") from e

        if info.code != 0 or info.type is None:
            raise WorkdayLookupError("holiday api returned unknown")
        return info.type.type == 0

    def lookup(self, day: date) -> WorkdayStatus:
        """Tri-state variant of :meth:`is_workday` that never raises."""

        try:
            workday = self.is_workday(day)
        except WorkdayLookupError as e:
            logger.warning(
                "Holiday calendar lookup failed",
                extra={"date": day.isoformat(), "error": str(e)},
            )
            return WorkdayStatus.UNKNOWN
        return WorkdayStatus.WORKDAY if workday else WorkdayStatus.NON_WORKDAY

    def previous_workday(self, day: date) -> date:
        """Walk backwards from `day` to the closest earlier China workday.

        A candidate the calendar cannot classify is accepted if it falls on Monday to
        Friday. If nothing qualifies within 31 days, the day before `day` is returned.
        """

        for offset in range(1, MAX_LOOKBACK_DAYS + 1):
            candidate = day - timedelta(days=offset)
            status = self.lookup(candidate)
            if status is WorkdayStatus.WORKDAY:
                return candidate
            if status is WorkdayStatus.UNKNOWN and not is_weekend(candidate):
                return candidate

        logger.warning(
            "No workday found in lookback window; using previous day",
            extra={"date": day.isoformat(), "lookback_days": MAX_LOOKBACK_DAYS},
        )
        return day - timedelta(days=1)

    def close(self) -> None:
        self._session.close()
