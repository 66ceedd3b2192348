"""Achievement unlocking with duplicate prevention."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.achievements.rules import (
    ACHIEVEMENTS_BY_SLUG,
    Achievement,
    AchievementContext,
    eligible_achievements,
)
from mindos.db.models import LessonCompletion, Mission, Referral, UserAchievement
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.xp_service import apply_xp, load_profile
from mindos.missions.state import MissionStatus
from mindos.referrals.state import ReferralStatus

logger = logging.getLogger(__name__)


@dataclass
class UnlockResult:
    unlocked: list[Achievement] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)


async def _count(db: AsyncSession, stmt) -> int:
    return (await db.execute(stmt)).scalar() or 0


async def build_context(
    db: AsyncSession,
    user_id: str,
    lesson: LessonCompletion | None = None,
) -> AchievementContext:
    """Snapshot the counters the achievement rules look at."""
    profile = await load_profile(db, user_id)
    lessons = await _count(
        db, select(func.count()).select_from(LessonCompletion).where(LessonCompletion.user_id == user_id)
    )
    missions = await _count(
        db,
        select(func.count())
        .select_from(Mission)
        .where(Mission.user_id == user_id, Mission.status == MissionStatus.DONE),
    )
    referrals = await _count(
        db,
        select(func.count())
        .select_from(Referral)
        .where(Referral.referrer_id == user_id, Referral.status == ReferralStatus.COMPLETED),
    )
    return AchievementContext(
        lessons_completed=lessons,
        missions_completed=missions,
        streak_days=profile.streak_days,
        level=profile.current_level,
        successful_referrals=referrals,
        last_performance_score=lesson.performance_score if lesson is not None else None,
        last_amazingness_score=lesson.amazingness_score if lesson is not None else None,
    )


async def unlocked_slugs(db: AsyncSession, user_id: str) -> set[str]:
    result = await db.execute(select(UserAchievement.slug).where(UserAchievement.user_id == user_id))
    return set(result.scalars().all())


async def _insert_once(db: AsyncSession, user_id: str, achievement: Achievement) -> bool:
    """Insert the unlock row inside a savepoint. Returns False if it already existed."""
    try:
        async with db.begin_nested():
            db.add(
                UserAchievement(
                    user_id=user_id,
                    slug=achievement.slug,
                    xp_bonus=achievement.xp_bonus,
                    unlocked_at=datetime.now(timezone.utc),
                )
            )
    except IntegrityError:
        logger.info("Achievement %s already unlocked for %s", achievement.slug, user_id)
        return False
    return True


async def unlock_achievement_if_eligible(
    db: AsyncSession,
    user_id: str,
    lesson: LessonCompletion | None = None,
) -> UnlockResult:
    """Unlock every achievement the user now qualifies for.

    Each unlock:
    1. Inserts into user_achievements (UNIQUE(user_id, slug))
    2. Grants the achievement's XP bonus
    3. Appends an achievement_unlocked event

    Bonuses can raise the level, which can satisfy further rules, so the
    evaluation repeats until a pass unlocks nothing.
    """
    result = UnlockResult()
    already = await unlocked_slugs(db, user_id)

    while True:
        context = await build_context(db, user_id, lesson)
        newly = eligible_achievements(context, already)
        if not newly:
            break

        for achievement in newly:
            already.add(achievement.slug)
            if not await _insert_once(db, user_id, achievement):
                continue

            if achievement.xp_bonus:
                xp = await apply_xp(
                    db,
                    user_id,
                    achievement.xp_bonus,
                    "achievement_unlocked",
                    description=f'Unlocked achievement: "{achievement.title}"',
                )
                result.notifications.extend(xp.notifications)

            await append_event(
                db,
                user_id,
                EventType.ACHIEVEMENT_UNLOCKED,
                EventCategory.ACHIEVEMENT,
                meta={
                    "slug": achievement.slug,
                    "title": achievement.title,
                    "rarity": achievement.rarity,
                    "xp_bonus": achievement.xp_bonus,
                },
            )
            result.unlocked.append(achievement)
            result.notifications.append(
                f"\U0001f3c6 <b>Achievement unlocked:</b> {achievement.icon} {achievement.title} "
                f"(+{achievement.xp_bonus} XP) for user {user_id}"
            )

    return result


async def list_user_achievements(db: AsyncSession, user_id: str) -> list[dict]:
    """Unlocked achievements, newest first, joined with their definitions."""
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.desc(), UserAchievement.id.desc())
    )
    rows = []
    for row in result.scalars():
        definition = ACHIEVEMENTS_BY_SLUG.get(row.slug)
        if definition is None:
            continue
        rows.append({**definition.as_dict(), "xp_bonus": row.xp_bonus, "unlocked_at": row.unlocked_at})
    return rows
