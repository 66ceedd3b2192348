"""Outbound service clients (text generation, notifications).

One ``httpx.AsyncClient`` is shared by all collaborators for the lifetime
of the process; the lifespan calls ``init_clients`` and ``close_clients``.
"""

import httpx
import structlog

from mindos.ai.textgen import BaseTextGenerator, NullTextGenerator, OpenAITextGenerator
from mindos.config import Settings
from mindos.notifications.sink import (
    BaseNotificationSink,
    LoggingNotificationSink,
    TelegramNotificationSink,
)

logger = structlog.get_logger()

_http: httpx.AsyncClient | None = None
_text_generator: BaseTextGenerator | None = None
_notification_sink: BaseNotificationSink | None = None


async def init_clients(settings: Settings) -> None:
    """Build the shared HTTP client and the collaborators configured in settings."""
    global _http, _text_generator, _notification_sink  # noqa: PLW0603
    _http = httpx.AsyncClient()

    if settings.openai_api_key:
        _text_generator = OpenAITextGenerator(
            _http,
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.openai_timeout_seconds,
        )
    else:
        logger.info("text_generation_disabled")
        _text_generator = NullTextGenerator()

    if settings.telegram_bot_token and settings.telegram_chat_id:
        _notification_sink = TelegramNotificationSink(
            _http,
            bot_token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
            timeout=settings.telegram_timeout_seconds,
        )
    else:
        logger.info("telegram_notifications_disabled")
        _notification_sink = LoggingNotificationSink()


async def close_clients() -> None:
    """Close the shared HTTP client."""
    global _http, _text_generator, _notification_sink  # noqa: PLW0603
    if _http:
        await _http.aclose()
    _http = None
    _text_generator = None
    _notification_sink = None


def get_text_generator() -> BaseTextGenerator:
    """Get the text generator (FastAPI dependency)."""
    if _text_generator is None:
        msg = "Clients not initialized. Call init_clients() first."
        raise RuntimeError(msg)
    return _text_generator


def get_notification_sink() -> BaseNotificationSink:
    """Get the notification sink (FastAPI dependency)."""
    if _notification_sink is None:
        msg = "Clients not initialized. Call init_clients() first."
        raise RuntimeError(msg)
    return _notification_sink
