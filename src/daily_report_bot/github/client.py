"""GitHub API client wrapper.

This intentionally wraps PyGithub and a shared `requests` session to keep GitHub calls out
of the publish cycle and make tests easy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OpenIssue:
    """Minimal open issue metadata used for the title pre-check."""

    title: str
    html_url: str


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Minimal issue metadata returned from GitHub after creation."""

    number: int
    title: str
    html_url: str


class GitHubClient:
    """Small wrapper around PyGithub for listing and creating issues."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository.strip("/ "):
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip("/ ")
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "daily-report-bot",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        # retry=None: a create that fails must not be resent, or a gateway error after
        # GitHub accepted the issue would file duplicates. lazy: no request until first use.
        self._github = github_api or Github(
            auth=auth, base_url=self._rest_base_url, retry=None, lazy=True
        )

        self._repo = self._github.get_repo(self._repository_name)
        logger.info("GitHub client ready", extra={"repo": self._repository_name})

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, *, path: str) -> str:
        path = path.strip("/")
        root = f"{self._rest_base_url}/repos/{self._repository_name}"
        return f"{root}/{path}" if path else root

    def list_open_issues(self, *, per_page: int = 100) -> list[OpenIssue]:
        """Fetch a single page of open issues (pull requests included, as GitHub returns them)."""

        url = self._repo_url(path="issues")
        resp = self._session.get(
            url,
            params={"state": "open", "per_page": per_page},
            timeout=30,
        )
        resp.raise_for_status()
        payload: Any = resp.json()
        if not isinstance(payload, list):
            raise ValueError("Unexpected list issues response: expected a JSON list")

        issues: list[OpenIssue] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            title = item.get("title")
            if not isinstance(title, str):
                continue
            html_url = item.get("html_url")
            if not isinstance(html_url, str):
                html_url = ""
            issues.append(OpenIssue(title=title, html_url=html_url))

        logger.debug(
            "Listed open issues",
            extra={"repo": self._repository_name, "count": len(issues)},
        )
        return issues

    def find_open_issue_by_title(self, title: str) -> OpenIssue | None:
        """Return the first open issue whose title equals `title` exactly."""

        for issue in self.list_open_issues():
            if issue.title == title:
                return issue
        return None

    def create_issue(self, *, title: str, body: str) -> CreatedIssue:
        if not title.strip():
            raise ValueError("Issue title is required")

        issue = self._repo.create_issue(title=title, body=body)

        html_url = getattr(issue, "html_url", None)
        if not isinstance(html_url, str) or not html_url.strip():
            raise ValueError("Unexpected create issue response: missing html_url")

        return CreatedIssue(number=issue.number, title=issue.title, html_url=html_url)

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
