"""Test configuration and fixtures."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from daily_report_bot.github.client import GitHubClient

SETTINGS_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_BASE_URL",
    "TIMEZONE",
    "TITLE_PREFIX",
    "SLACK_WEBHOOK_URL",
    "RUN_LOG_FILE",
    "CHINA_WORKDAY_API",
    "LOG_LEVEL",
)


def json_response(payload: Any, *, status: int = 200) -> Mock:
    """A minimal stand-in for `requests.Response`."""

    resp = Mock(spec=requests.Response)
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def holiday_response(type_code: int | None, *, code: int = 0, status: int = 200) -> Mock:
    payload: dict[str, Any] = {"code": code}
    if type_code is not None:
        payload["type"] = {"type": type_code, "name": "周一"}
        payload["holiday"] = None
    return json_response(payload, status=status)


def weekday_type(day: date) -> int:
    """Plain calendar without holidays: 0 on Monday-Friday, 1 on weekends."""

    return 1 if day.weekday() >= 5 else 0


def calendar_session(classify: Callable[[date], int | None] = weekday_type) -> Mock:
    """Session answering holiday calendar lookups from `classify(date)`.

    `classify` returns the calendar `type` code, or None to simulate an HTTP 500.
    """

    def _get(url: str, **_kwargs: Any) -> Mock:
        day = date.fromisoformat(url.rstrip("/").rsplit("/", 1)[-1])
        type_code = classify(day)
        if type_code is None:
            return json_response({}, status=500)
        return holiday_response(type_code)

    session = Mock(spec=requests.Session)
    session.get.side_effect = _get
    return session


class FakeTracker:
    """In-memory GitHub issues backing a mocked session and Repository."""

    def __init__(self) -> None:
        self.issues: list[dict[str, Any]] = []
        self.session = Mock(spec=requests.Session)
        self.session.headers = {}
        self.session.get.side_effect = lambda *_a, **_k: json_response(list(self.issues))
        self.repo = Mock()
        self.repo.create_issue.side_effect = self._create

    def _create(self, *, title: str, body: str) -> Mock:
        number = len(self.issues) + 1
        html_url = f"https://github.com/acme/reports/issues/{number}"
        self.issues.append({"number": number, "title": title, "body": body, "html_url": html_url})
        issue = Mock()
        issue.number = number
        issue.title = title
        issue.html_url = html_url
        return issue

    def client(self) -> GitHubClient:
        return GitHubClient(
            token="test-token",
            repository="acme/reports",
            repo=self.repo,
            session=self.session,
        )


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def no_sleep() -> Mock:
    return Mock(name="sleep")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    """Isolate settings from the developer's environment and any `.env` file."""

    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def fixed_clock(value: datetime) -> Callable[[], datetime]:
    return lambda: value


# Monday 2025-01-06 10:00 in Asia/Shanghai.
MONDAY_10AM_CN = datetime(2025, 1, 6, 2, 0, tzinfo=UTC)


class StubGitHub:
    """Local HTTP server standing in for the GitHub REST API.

    Every request is recorded as `(method, path)` and answered with the JSON payload
    configured for its method in `responses`.
    """

    def __init__(self) -> None:
        self.requests: list[tuple[str, str]] = []
        self.responses: dict[str, tuple[int, Any]] = {
            "GET": (200, []),
            "POST": (
                201,
                {
                    "number": 1,
                    "title": "created",
                    "html_url": "https://github.com/acme/reports/issues/1",
                },
            ),
        }
        stub = self

        class Handler(BaseHTTPRequestHandler):
            def _reply(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                if length:
                    self.rfile.read(length)
                stub.requests.append((self.command, self.path))
                status, payload = stub.responses[self.command]
                body = json.dumps(payload).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            do_GET = _reply
            do_POST = _reply

            def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
                return

        self.server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self.base_url = f"http://127.0.0.1:{self.server.server_port}"

    def requests_for(self, method: str) -> list[str]:
        return [path for m, path in self.requests if m == method]


@pytest.fixture
def github_stub() -> Iterator[StubGitHub]:
    stub = StubGitHub()
    thread = threading.Thread(target=stub.server.serve_forever, daemon=True)
    thread.start()
    try:
        yield stub
    finally:
        stub.server.shutdown()
        stub.server.server_close()
