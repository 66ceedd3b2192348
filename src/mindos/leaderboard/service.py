"""Leaderboard reads from the profiles table."""

from __future__ import annotations

import logging

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.db.models import Profile
from mindos.leaderboard.ranking import (
    WINDOW_FIELDS,
    LeaderboardUser,
    LeaderboardWindow,
    Ranking,
    parse_window,
    rank,
)

logger = logging.getLogger(__name__)


def id_sort_key(dialect_name: str):
    """Profile id compared by code point, matching the tie-break in ``rank()``.

    SQLite's default BINARY collation already compares that way.
    """
    if dialect_name == "postgresql":
        return Profile.id.collate("C")
    return Profile.id


def _to_user(profile: Profile) -> LeaderboardUser:
    return LeaderboardUser(
        user_id=profile.id,
        total_xp=profile.total_xp,
        weekly_xp=profile.weekly_xp,
        daily_xp=profile.daily_xp,
        display_name=profile.display_name,
        level=profile.current_level,
        streak_days=profile.streak_days,
    )


async def get_leaderboard(
    db: AsyncSession,
    window: LeaderboardWindow | str = LeaderboardWindow.GLOBAL,
    requesting_user_id: str | None = None,
    limit: int = 50,
) -> Ranking:
    """Top ``limit`` users for the window plus the requester's own rank.

    The database applies the same ordering as ``rank()`` (XP desc, user id
    asc), so the requester's rank is the number of profiles ahead of them
    plus one.
    """
    selected = parse_window(window)
    column = getattr(Profile, WINDOW_FIELDS[selected])
    profile_id = id_sort_key(db.get_bind().dialect.name)

    result = await db.execute(
        select(Profile)
        .order_by(column.desc(), profile_id.asc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    ranking = rank([_to_user(p) for p in result.scalars()], selected)
    ranking.population = (await db.execute(select(func.count()).select_from(Profile))).scalar() or 0
    ranking.own_rank = None

    if requesting_user_id is not None:
        own_xp = (await db.execute(select(column).where(Profile.id == requesting_user_id))).scalar_one_or_none()
        if own_xp is not None:
            ahead = await db.execute(
                select(func.count())
                .select_from(Profile)
                .where(or_(column > own_xp, and_(column == own_xp, profile_id < requesting_user_id)))
            )
            ranking.own_rank = (ahead.scalar() or 0) + 1

    logger.debug("Leaderboard %s: %d entries, population %d", selected.value, len(ranking.entries), ranking.population)
    return ranking
