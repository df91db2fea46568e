"""GitHub integration: REST/PyGithub client and daily issue creation."""

from daily_report_bot.github.client import CreatedIssue, GitHubClient, OpenIssue
from daily_report_bot.github.issue_service import (
    IssueAlreadyExists,
    IssueService,
    build_issue_body,
    build_issue_title,
)

__all__ = [
    "CreatedIssue",
    "GitHubClient",
    "IssueAlreadyExists",
    "IssueService",
    "OpenIssue",
    "build_issue_body",
    "build_issue_title",
]
