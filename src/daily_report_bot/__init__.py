"""Daily report issue bot.

Files one "daily report" GitHub issue per mainland China workday:
- configuration loaded from the environment / `.env`
- structured logging
- China workday resolution backed by a public holiday calendar
- idempotent issue creation with optional Slack notification
"""

__version__ = "0.1.0"

from daily_report_bot.config import DailyReportSettings

__all__ = ["__version__", "DailyReportSettings"]
