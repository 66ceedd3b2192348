"""Append-only activity log."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.db.models import Event
from mindos.events.categories import EventCategory, EventType


async def append_event(
    db: AsyncSession,
    user_id: str | None,
    event_type: EventType | str,
    category: EventCategory = EventCategory.GENERAL,
    meta: dict[str, Any] | None = None,
    xp_impact: int = 0,
) -> Event:
    """Add one event row to the current transaction and flush it."""
    event = Event(
        user_id=user_id,
        type=EventType(event_type).value if isinstance(event_type, EventType) else event_type,
        category=EventCategory(category).value,
        meta=meta or {},
        xp_impact=xp_impact,
    )
    db.add(event)
    await db.flush()
    return event


async def list_events(
    db: AsyncSession,
    user_id: str,
    page: int = 1,
    per_page: int = 20,
    category: EventCategory | None = None,
) -> tuple[list[Event], int]:
    """Newest-first page of a user's events and the total count."""
    filters = [Event.user_id == user_id]
    if category is not None:
        filters.append(Event.category == category.value)

    total = (await db.execute(select(func.count()).select_from(Event).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Event)
        .where(*filters)
        .order_by(Event.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(result.scalars().all()), total
