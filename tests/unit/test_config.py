"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from daily_report_bot.config import CalendarSettings, DailyReportSettings


def _write_env(path: Path, lines: list[str]) -> None:
    path.write_text("\n".join([*lines, ""]), encoding="utf-8")


def test_settings_loads_from_dotenv(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _write_env(
        tmp_path / ".env",
        [
            "GITHUB_TOKEN=test-token",
            "GITHUB_OWNER=acme",
            "GITHUB_REPO=reports",
            "LOG_LEVEL=DEBUG",
        ],
    )

    settings = DailyReportSettings()

    assert settings.github_token == "test-token"
    assert settings.repository == "acme/reports"
    assert settings.log_level == "DEBUG"


def test_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_TOKEN", "test-token")
    clean_env.setenv("GITHUB_OWNER", "acme")
    clean_env.setenv("GITHUB_REPO", "reports")

    settings = DailyReportSettings()

    assert settings.timezone == "Asia/Shanghai"
    assert settings.title_prefix == "服务端个人日报"
    assert settings.run_log_file == Path("logs") / "daily_run.log"
    assert settings.slack_webhook_url == ""
    assert settings.china_workday_api == ""
    assert settings.github_base_url == "https://api.github.com"


def test_environment_overrides_dotenv_and_is_stripped(
    clean_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _write_env(
        tmp_path / ".env",
        ["GITHUB_TOKEN=from-file", "GITHUB_OWNER=acme", "GITHUB_REPO=reports"],
    )
    clean_env.setenv("GITHUB_TOKEN", "  from-env  ")
    clean_env.setenv("TITLE_PREFIX", "Backend daily")

    settings = DailyReportSettings()

    assert settings.github_token == "from-env"
    assert settings.title_prefix == "Backend daily"


def test_empty_values_fall_back_to_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GITHUB_TOKEN", "test-token")
    clean_env.setenv("GITHUB_OWNER", "acme")
    clean_env.setenv("GITHUB_REPO", "reports")
    clean_env.setenv("TIMEZONE", "")
    clean_env.setenv("TITLE_PREFIX", "")

    settings = DailyReportSettings()

    assert settings.timezone == "Asia/Shanghai"
    assert settings.title_prefix == "服务端个人日报"


@pytest.mark.parametrize("missing", ["GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_REPO"])
def test_missing_github_target_is_a_configuration_error(
    clean_env: pytest.MonkeyPatch, missing: str
) -> None:
    for name in ("GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_REPO"):
        if name != missing:
            clean_env.setenv(name, "value")

    with pytest.raises(ValidationError, match=missing):
        DailyReportSettings()


def test_calendar_settings_need_no_credentials(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CHINA_WORKDAY_API", "https://cal.example/{date}")

    settings = CalendarSettings()

    assert settings.china_workday_api == "https://cal.example/{date}"
