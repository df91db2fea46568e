"""Daily report issue creation.

- deterministic title per report date
- idempotent-safe: an open issue with the same title is never duplicated
- the remote tracker is the only source of truth (no local persistence)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from daily_report_bot.github.client import CreatedIssue, GitHubClient, OpenIssue

logger = logging.getLogger(__name__)

ISSUE_BODY_LINES: tuple[str, ...] = (
    "请在此填写：",
    "- 昨日进展：",
    "- 今日计划：",
    "- 风险/阻塞：",
)


def build_issue_title(report_date: date, title_prefix: str) -> str:
    """Return `【YYYY-MM-DD】 <prefix>` for the given report date."""

    return f"【{report_date.isoformat()}】 {title_prefix}"


def build_issue_body() -> str:
    return "\n".join(ISSUE_BODY_LINES)


@dataclass(frozen=True, slots=True)
class IssueAlreadyExists(Exception):
    """Raised when an open issue with the given title already exists on GitHub."""

    existing: OpenIssue

    def __str__(self) -> str:
        return f"Issue already exists: {self.existing.title!r} {self.existing.html_url}"


class IssueService:
    """High-level, testable issue creation orchestration."""

    def __init__(self, *, github: GitHubClient) -> None:
        self._github = github

    def create_issue(self, *, title: str, body: str) -> CreatedIssue:
        """Create an issue unless an open one with exactly the same title exists.

        Raises:
            IssueAlreadyExists: If an open issue already carries `title`.
        """

        existing = self._github.find_open_issue_by_title(title)
        if existing is not None:
            raise IssueAlreadyExists(existing)

        created = self._github.create_issue(title=title, body=body)
        logger.info(
            "Issue created",
            extra={
                "repo": self._github.repository,
                "issue_number": created.number,
                "title": created.title,
                "url": created.html_url,
            },
        )
        return created

    def create_daily_report(self, *, report_date: date, title_prefix: str) -> CreatedIssue:
        return self.create_issue(
            title=build_issue_title(report_date, title_prefix),
            body=build_issue_body(),
        )
