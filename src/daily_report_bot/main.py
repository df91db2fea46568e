"""CLI entrypoint for the daily report bot."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from datetime import date, datetime
from typing import TypeVar

from pydantic import ValidationError

from daily_report_bot import __version__
from daily_report_bot.config import CalendarSettings, DailyReportSettings
from daily_report_bot.cycle import CycleOutcome, DailyReportCycle
from daily_report_bot.github.client import GitHubClient
from daily_report_bot.github.issue_service import IssueService
from daily_report_bot.logging import configure_logging
from daily_report_bot.notify import SlackNotifier
from daily_report_bot.runlog import RunLog
from daily_report_bot.scheduler import DailyScheduler
from daily_report_bot.timeutil import china_timezone, load_timezone, start_of_day_by_offset_x10
from daily_report_bot.workday import WorkdayResolver

logger = logging.getLogger(__name__)

SettingsT = TypeVar("SettingsT", bound=CalendarSettings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="daily-report-bot",
        description="File a daily report GitHub issue on every mainland China workday",
    )
    parser.add_argument("--version", action="version", version=f"daily-report-bot {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the daemon: one cycle every day at 10:00 UTC+8")
    run.add_argument(
        "--max-runs",
        type=int,
        default=None,
        help="Stop after this many scheduled runs (default: run forever)",
    )

    subparsers.add_parser("run-once", help="Run a single publish cycle immediately")

    check_workday = subparsers.add_parser(
        "check-workday",
        help="Classify a date against the China work calendar (no GitHub access needed)",
    )
    check_workday.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date in the form YYYY-MM-DD (defaults to today in Asia/Shanghai)",
    )

    start_of_day = subparsers.add_parser(
        "start-of-day",
        help="Print the Unix timestamp of local midnight for a fixed UTC offset",
    )
    start_of_day.add_argument("timestamp", type=int, help="Unix timestamp (seconds or milliseconds)")
    start_of_day.add_argument(
        "--offset-x10",
        type=int,
        default=80,
        help="UTC offset in tenths of an hour, e.g. 80 for UTC+8, 55 for UTC+5:30",
    )

    return parser


def build_cycle(
    settings: DailyReportSettings,
) -> tuple[DailyReportCycle, list[GitHubClient | WorkdayResolver | SlackNotifier]]:
    """Wire the publish cycle from settings; returns it with the resources to close."""

    resolver = WorkdayResolver(endpoint=settings.china_workday_api)
    github = GitHubClient(
        token=settings.github_token,
        repository=settings.repository,
        base_url=settings.github_base_url,
    )
    notifier = SlackNotifier(settings.slack_webhook_url) if settings.slack_webhook_url else None

    cycle = DailyReportCycle(
        resolver=resolver,
        issues=IssueService(github=github),
        title_prefix=settings.title_prefix,
        report_tz=load_timezone(settings.timezone),
        run_log=RunLog(settings.run_log_file),
        notifier=notifier,
    )
    resources: list[GitHubClient | WorkdayResolver | SlackNotifier] = [resolver, github]
    if notifier is not None:
        resources.append(notifier)
    return cycle, resources


def _load_settings(settings_cls: type[SettingsT]) -> SettingsT | None:
    try:
        return settings_cls()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return None


def _check_workday(settings: CalendarSettings, day: date | None) -> int:
    target = day or datetime.now(china_timezone()).date()
    resolver = WorkdayResolver(endpoint=settings.china_workday_api)
    try:
        status = resolver.lookup(target)
        previous = resolver.previous_workday(target)
    finally:
        resolver.close()

    print(f"{target.isoformat()}: {status.value}; previous workday: {previous.isoformat()}")
    return 0


def _publish(settings: DailyReportSettings, command: str, max_runs: int | None) -> int:
    cycle, resources = build_cycle(settings)
    try:
        if command == "run-once":
            result = cycle.run()
            print(f"{result.outcome.value}: {result.log_detail}")
            return 1 if result.outcome is CycleOutcome.ERROR else 0

        if command == "run":
            scheduler = DailyScheduler()
            scheduler.run_forever(cycle.run, max_runs=max_runs)
            return 0
    finally:
        for resource in resources:
            resource.close()

    logger.error("Unknown command", extra={"command": command})
    return 2


def _guarded(command: Callable[[], int]) -> int:
    try:
        return command()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
        return 0
    except Exception:
        logger.exception("Command failed")
        return 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "start-of-day":
        try:
            print(start_of_day_by_offset_x10(args.timestamp, args.offset_x10))
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2
        return 0

    if args.command == "check-workday":
        calendar_settings = _load_settings(CalendarSettings)
        if calendar_settings is None:
            return 2
        configure_logging(calendar_settings.log_level)
        return _guarded(lambda: _check_workday(calendar_settings, args.date))

    settings = _load_settings(DailyReportSettings)
    if settings is None:
        return 2
    configure_logging(settings.log_level)
    return _guarded(lambda: _publish(settings, args.command, getattr(args, "max_runs", None)))


if __name__ == "__main__":
    raise SystemExit(main())
