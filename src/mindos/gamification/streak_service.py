"""Daily activity streaks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mindos.errors import InvalidInput
from mindos.gamification.xp_service import load_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakResult:
    streak_days: int
    longest_streak: int
    last_activity_date: date
    changed: bool


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def next_streak(last_activity_date: date | None, streak_days: int, activity_date: date) -> tuple[int, bool]:
    """Compute the streak after an activity on ``activity_date``.

    Returns ``(streak_days, changed)``. Same-day and out-of-order (earlier)
    dates are duplicates and leave the streak untouched.
    """
    if last_activity_date is None:
        return 1, True
    if activity_date <= last_activity_date:
        return streak_days, False
    if activity_date == last_activity_date + timedelta(days=1):
        return streak_days + 1, True
    return 1, True


async def record_activity(db: AsyncSession, user_id: str, activity_date: date | None = None) -> StreakResult:
    """Record activity for a user and update the streak.

    The profile row is locked for the read-modify-write so concurrent
    requests for the same user serialize.
    """
    if activity_date is None:
        activity_date = today_utc()
    elif isinstance(activity_date, datetime) or not isinstance(activity_date, date):
        msg = f"activity_date must be a date, got {activity_date!r}"
        raise InvalidInput(msg)

    profile = await load_profile(db, user_id, for_update=True)
    streak, changed = next_streak(profile.last_activity_date, profile.streak_days, activity_date)

    if changed:
        profile.streak_days = streak
        profile.longest_streak = max(profile.longest_streak, streak)
        profile.last_activity_date = activity_date
        await db.flush()
        logger.debug("User %s streak now %d", user_id, streak)

    return StreakResult(
        streak_days=profile.streak_days,
        longest_streak=profile.longest_streak,
        last_activity_date=profile.last_activity_date,
        changed=changed,
    )
