"""XP ledger writes with level-up detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.config import get_settings
from mindos.db.models import Profile, XpEvent
from mindos.errors import InvalidAmount, InvalidInput, NotFound
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.level_thresholds import level_for_xp, rank_title

logger = logging.getLogger(__name__)


@dataclass
class XpResult:
    """Outcome of one XP application; ``notifications`` is delivered after commit."""

    new_total_xp: int
    new_level: int
    previous_level: int
    leveled_up: bool
    notifications: list[str] = field(default_factory=list)


def _clamped(column, amount: int):
    """``max(0, column + amount)`` evaluated in SQL."""
    expr = column + amount
    return case((expr < 0, 0), else_=expr)


async def load_profile(db: AsyncSession, user_id: str, *, for_update: bool = False) -> Profile:
    """Fetch a profile, refreshing any stale identity-map copy.

    Raises NotFound when the user has no profile.
    """
    stmt = select(Profile).where(Profile.id == user_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    profile = (await db.execute(stmt)).scalar_one_or_none()
    if profile is None:
        msg = f"No profile for user {user_id}"
        raise NotFound(msg)
    return profile


async def apply_xp(
    db: AsyncSession,
    user_id: str,
    amount: int,
    source: str,
    description: str | None = None,
) -> XpResult:
    """Apply an XP delta to a user.

    1. Atomically increment total/weekly/daily XP in one UPDATE (period
       counters clamp at zero, the total may not go negative)
    2. Recompute the level from the new total
    3. Insert the xp_events ledger row and an xp_earned event
    4. On level-up, add a level_up event and queue a notification

    Everything is flushed into the caller's transaction; the caller commits.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        msg = f"XP amount must be an integer, got {amount!r}"
        raise InvalidAmount(msg)
    if not isinstance(source, str) or not source.strip():
        raise InvalidInput("XP source must be a non-empty string")

    settings = get_settings()
    now = datetime.now(timezone.utc)

    stmt = (
        update(Profile)
        .where(Profile.id == user_id, Profile.total_xp + amount >= 0)
        .values(
            total_xp=Profile.total_xp + amount,
            weekly_xp=_clamped(Profile.weekly_xp, amount),
            daily_xp=_clamped(Profile.daily_xp, amount),
            updated_at=now,
        )
        .returning(Profile.total_xp, Profile.current_level)
        .execution_options(synchronize_session=False)
    )
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        exists = await db.execute(select(Profile.id).where(Profile.id == user_id))
        if exists.scalar_one_or_none() is None:
            msg = f"No profile for user {user_id}"
            raise NotFound(msg)
        msg = f"Applying {amount} XP would make the total negative"
        raise InvalidAmount(msg)

    new_total, previous_level = row
    new_level = level_for_xp(new_total, settings.xp_per_level)
    if new_level != previous_level:
        await db.execute(
            update(Profile)
            .where(Profile.id == user_id)
            .values(current_level=new_level)
            .execution_options(synchronize_session=False)
        )

    db.add(
        XpEvent(
            user_id=user_id,
            amount=amount,
            source=source,
            description=description,
            created_at=now,
        )
    )
    await append_event(
        db,
        user_id,
        EventType.XP_EARNED,
        EventCategory.GAMIFICATION,
        meta={"source": source, "amount": amount, "total_xp": new_total},
        xp_impact=amount,
    )

    result = XpResult(
        new_total_xp=new_total,
        new_level=new_level,
        previous_level=previous_level,
        leveled_up=new_level > previous_level,
    )
    if result.leveled_up:
        title = rank_title(new_level)
        await append_event(
            db,
            user_id,
            EventType.LEVEL_UP,
            EventCategory.GAMIFICATION,
            meta={"old_level": previous_level, "new_level": new_level, "title": title},
            xp_impact=0,
        )
        result.notifications.append(
            f"\U0001f389 <b>Level up!</b> User {user_id} reached level {new_level} ({title})"
        )
        logger.info("User %s leveled up %d -> %d", user_id, previous_level, new_level)

    return result


async def xp_history(
    db: AsyncSession,
    user_id: str,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[XpEvent], int]:
    """Newest-first page of a user's XP ledger and the total entry count."""
    total = (
        await db.execute(select(func.count()).select_from(XpEvent).where(XpEvent.user_id == user_id))
    ).scalar() or 0
    result = await db.execute(
        select(XpEvent)
        .where(XpEvent.user_id == user_id)
        .order_by(XpEvent.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(result.scalars().all()), total
