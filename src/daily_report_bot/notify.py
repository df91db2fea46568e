"""Slack-compatible incoming webhook notifications."""

from __future__ import annotations

import logging

import requests

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when the webhook rejects or cannot receive a message."""


class SlackNotifier:
    """Posts `{"text": ...}` payloads to an incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        if not webhook_url.strip():
            raise ValueError("webhook_url is required")
        self._webhook_url = webhook_url.strip()
        self._session = session or requests.Session()
        self._timeout = timeout

    def send(self, text: str) -> None:
        try:
            resp = self._session.post(self._webhook_url, json={"text": text}, timeout=self._timeout)
        except requests.RequestException as e:
            raise NotificationError(f"slack webhook request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise NotificationError(f"slack webhook failed: {resp.status_code}")

    def notify(self, text: str) -> bool:
        """Best-effort :meth:`send`; returns False instead of raising."""

        try:
            self.send(text)
        except NotificationError as e:
            logger.warning("Webhook notification failed", extra={"error": str(e)})
            return False
        return True

    def close(self) -> None:
        self._session.close()
