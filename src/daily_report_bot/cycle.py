"""One publish cycle: gate on the China calendar, then file the daily report issue."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from enum import Enum

from daily_report_bot.github.issue_service import IssueAlreadyExists, IssueService
from daily_report_bot.notify import SlackNotifier
from daily_report_bot.runlog import RunLog
from daily_report_bot.timeutil import UTC_PLUS_8, china_timezone, is_weekend
from daily_report_bot.workday import WorkdayResolver, WorkdayStatus

logger = logging.getLogger(__name__)

NOT_A_WORKDAY = "not a China mainland workday"
CREATED_MESSAGE = "今日日报已创建：{url}"


class CycleOutcome(str, Enum):
    SKIP = "skip"
    ERROR = "error"
    EXISTS = "exists"
    CREATED = "created"

    @property
    def log_tag(self) -> str:
        return _RUN_LOG_TAGS[self]


_RUN_LOG_TAGS: dict[CycleOutcome, str] = {
    CycleOutcome.SKIP: "SKIPPED",
    CycleOutcome.ERROR: "ERROR",
    CycleOutcome.EXISTS: "EXISTS",
    CycleOutcome.CREATED: "CREATED",
}


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Terminal outcome of a single cycle."""

    outcome: CycleOutcome
    url: str | None = None
    report_date: date | None = None
    detail: str = ""

    @property
    def log_detail(self) -> str:
        return self.url or self.detail


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DailyReportCycle:
    """Decides skip / exists / created for "now" and records the outcome exactly once."""

    def __init__(
        self,
        *,
        resolver: WorkdayResolver,
        issues: IssueService,
        title_prefix: str,
        report_tz: tzinfo = UTC_PLUS_8,
        run_log: RunLog | None = None,
        notifier: SlackNotifier | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._resolver = resolver
        self._issues = issues
        self._title_prefix = title_prefix
        self._report_tz = report_tz
        self._run_log = run_log
        self._notifier = notifier
        self._clock = clock

    def _now(self) -> datetime:
        return self._clock().astimezone(self._report_tz)

    def _is_gating_workday(self, today_cn: date) -> bool:
        status = self._resolver.lookup(today_cn)
        if status is WorkdayStatus.UNKNOWN:
            # Calendar unavailable: only weekends are skipped.
            return not is_weekend(today_cn)
        return status is WorkdayStatus.WORKDAY

    def _decide(self, now: datetime) -> CycleResult:
        # The gate always uses the China date of this instant, whatever the reporting zone.
        today_cn = now.astimezone(china_timezone()).date()
        if not self._is_gating_workday(today_cn):
            return CycleResult(outcome=CycleOutcome.SKIP, detail=NOT_A_WORKDAY)

        report_date = self._resolver.previous_workday(today_cn)
        try:
            created = self._issues.create_daily_report(
                report_date=report_date, title_prefix=self._title_prefix
            )
        except IssueAlreadyExists as e:
            return CycleResult(
                outcome=CycleOutcome.EXISTS,
                url=e.existing.html_url,
                report_date=report_date,
            )

        return CycleResult(
            outcome=CycleOutcome.CREATED,
            url=created.html_url,
            report_date=report_date,
        )

    def run(self) -> CycleResult:
        now = self._now()
        logger.info("Starting daily report cycle", extra={"now": now.isoformat()})

        try:
            result = self._decide(now)
        except Exception as e:
            logger.exception("Daily report cycle failed")
            result = CycleResult(outcome=CycleOutcome.ERROR, detail=str(e) or type(e).__name__)

        self._record(result)
        return result

    def _record(self, result: CycleResult) -> None:
        logger.info(
            "Daily report cycle finished",
            extra={
                "outcome": result.outcome.value,
                "url": result.url,
                "report_date": result.report_date.isoformat() if result.report_date else None,
                "detail": result.detail,
            },
        )

        if self._run_log is not None:
            self._run_log.append(result.outcome.log_tag, result.log_detail, when=self._now())

        if result.outcome is CycleOutcome.CREATED and self._notifier is not None:
            self._notifier.notify(CREATED_MESSAGE.format(url=result.url))
