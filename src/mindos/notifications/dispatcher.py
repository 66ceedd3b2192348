"""Post-commit delivery of queued notification messages."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from mindos.notifications.sink import BaseNotificationSink

logger = structlog.get_logger()


async def dispatch_notifications(sink: BaseNotificationSink, messages: Iterable[str]) -> int:
    """Deliver messages one by one. Returns how many were delivered.

    Runs after the triggering transaction committed; a failed message is
    logged and skipped and never affects the operation that queued it.
    """
    delivered = 0
    for message in messages:
        try:
            await sink.notify(message)
            delivered += 1
        except Exception:
            logger.warning("notification_delivery_failed", sink=type(sink).__name__, exc_info=True)
    return delivered
