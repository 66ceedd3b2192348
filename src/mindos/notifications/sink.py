"""
Notification sinks.

Messages are short HTML-formatted strings for a team chat. Delivery is
fire-and-forget: ``notify`` raises ExternalServiceUnavailable on failure
and the dispatcher logs and swallows it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog

from mindos.errors import ExternalServiceUnavailable

logger = structlog.get_logger()


class BaseNotificationSink(ABC):
    """Abstract base class for notification delivery."""

    @abstractmethod
    async def notify(self, message: str) -> None:
        ...


class TelegramNotificationSink(BaseNotificationSink):
    """Send messages to a Telegram chat via the Bot API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        bot_token: str,
        chat_id: str,
        timeout: float = 10.0,
        api_base: str = "https://api.telegram.org",
    ) -> None:
        self.client = client
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")

    async def notify(self, message: str) -> None:
        try:
            response = await self.client.post(
                f"{self.api_base}/bot{self.bot_token}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": message,
                    "parse_mode": "HTML",
                    "disable_web_page_preview": True,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            msg = "Telegram notification failed"
            raise ExternalServiceUnavailable(msg) from exc


class LoggingNotificationSink(BaseNotificationSink):
    """Writes messages to the log; used when Telegram is not configured."""

    async def notify(self, message: str) -> None:
        logger.info("notification", message=message)

