"""Configuration for the daily report bot.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The settings object is built once by the CLI and its values are passed explicitly into
the resolver, publisher and scheduler; nothing below the CLI reads the environment.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEZONE = "Asia/Shanghai"
DEFAULT_TITLE_PREFIX = "服务端个人日报"
DEFAULT_RUN_LOG_FILE = Path("logs") / "daily_run.log"


class CalendarSettings(BaseSettings):
    """Settings needed to resolve China workdays (no GitHub credentials).

    Environment variables:
    - CHINA_WORKDAY_API (optional, `{date}` is replaced by the ISO date)
    - TIMEZONE          (optional)
    - LOG_LEVEL         (optional)
    """

    china_workday_api: str = Field(
        default="",
        validation_alias="CHINA_WORKDAY_API",
        description="Holiday calendar endpoint template; empty means the public timor.tech API",
    )
    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        validation_alias="TIMEZONE",
        description="IANA timezone used as the reporting timezone",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        env_ignore_empty=True,
        str_strip_whitespace=True,
    )


class DailyReportSettings(CalendarSettings):
    """Settings for the daily report daemon.

    Environment variables (in addition to :class:`CalendarSettings`):
    - GITHUB_TOKEN       (required, needs permission to create issues)
    - GITHUB_OWNER       (required)
    - GITHUB_REPO        (required)
    - GITHUB_BASE_URL    (optional)
    - TITLE_PREFIX       (optional)
    - SLACK_WEBHOOK_URL  (optional)
    - RUN_LOG_FILE       (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `DailyReportSettings(_env_file=path_to_env)`.
    """

    # Defaults are empty so `DailyReportSettings()` type-checks; the validator below
    # enforces that real values were provided.
    github_token: str = Field(
        default="",
        validation_alias="GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_owner: str = Field(
        default="",
        validation_alias="GITHUB_OWNER",
        description="Owner (user or organisation) of the target repository",
    )
    github_repo: str = Field(
        default="",
        validation_alias="GITHUB_REPO",
        description="Name of the target repository",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    title_prefix: str = Field(
        default=DEFAULT_TITLE_PREFIX,
        validation_alias="TITLE_PREFIX",
        description="Text placed after the bracketed date in the issue title",
    )
    slack_webhook_url: str = Field(
        default="",
        validation_alias="SLACK_WEBHOOK_URL",
        description="Slack incoming webhook notified when an issue is created",
    )
    run_log_file: Path = Field(
        default=DEFAULT_RUN_LOG_FILE,
        validation_alias="RUN_LOG_FILE",
        description="File receiving one line per cycle outcome",
    )

    @model_validator(mode="after")
    def _require_github_target(self) -> DailyReportSettings:
        missing = [
            name
            for name, value in (
                ("GITHUB_OWNER", self.github_owner),
                ("GITHUB_REPO", self.github_repo),
                ("GITHUB_TOKEN", self.github_token),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"missing env: {', '.join(missing)}")
        return self

    @property
    def repository(self) -> str:
        """Repository in the form "owner/repo"."""

        return f"{self.github_owner}/{self.github_repo}"
