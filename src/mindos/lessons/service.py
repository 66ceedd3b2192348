"""Lesson completion: score, persist, award XP and run the follow-up rules."""

from __future__ import annotations

import html
import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.achievements.service import unlock_achievement_if_eligible
from mindos.config import get_settings
from mindos.db.models import LessonCompletion
from mindos.errors import InvalidInput
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.streak_service import StreakResult, record_activity, today_utc
from mindos.gamification.xp_service import XpResult, apply_xp, load_profile
from mindos.lessons.scoring import CompletionFeedback, LessonXp, lesson_xp, quality_tier, score_completion
from mindos.missions.service import MAX_RATING, MIN_RATING, get_mission
from mindos.referrals.service import complete_pending_referral_for

logger = logging.getLogger(__name__)


@dataclass
class LessonCompletionResult:
    completion: LessonCompletion
    amazingness_score: int
    quality_tier: str
    xp_breakdown: LessonXp
    xp: XpResult
    streak: StreakResult
    referral_completed: bool = False
    achievements: list[str] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)


async def complete_lesson(
    db: AsyncSession,
    user_id: str,
    lesson_id: str,
    feedback: CompletionFeedback,
    amazingness_rating: int | None = None,
    completion_time_seconds: int | None = None,
    mission_id: int | None = None,
    base_xp: int | None = None,
    activity_date: date | None = None,
) -> LessonCompletionResult:
    """Record a finished lesson.

    1. Score the completion and pick its quality tier
    2. Insert the lesson_completions row
    3. Award performance-scaled XP (+50% for amazing completions)
    4. Append a lesson_completed event and record streak activity
    5. On the first lesson, complete the referral the user signed up with
    6. Evaluate achievements for the learner (and the referrer, if any)
    """
    if not lesson_id or not lesson_id.strip():
        raise InvalidInput("lesson_id is required")
    if amazingness_rating is not None and (
        isinstance(amazingness_rating, bool) or not MIN_RATING <= amazingness_rating <= MAX_RATING
    ):
        msg = f"amazingness_rating must be between {MIN_RATING} and {MAX_RATING}"
        raise InvalidInput(msg)
    if completion_time_seconds is not None and completion_time_seconds < 0:
        raise InvalidInput("completion_time_seconds must be non-negative")

    await load_profile(db, user_id)
    if mission_id is not None:
        await get_mission(db, mission_id, user_id)
    settings = get_settings()
    score = score_completion(feedback)
    tier = quality_tier(score)
    breakdown = lesson_xp(settings.lesson_base_xp if base_xp is None else base_xp, feedback.performance_score, score)

    previous_lessons = (
        await db.execute(
            select(func.count()).select_from(LessonCompletion).where(LessonCompletion.user_id == user_id)
        )
    ).scalar() or 0

    completion = LessonCompletion(
        user_id=user_id,
        lesson_id=lesson_id.strip(),
        mission_id=mission_id,
        performance_score=math.floor(feedback.performance_score),
        amazingness_rating=amazingness_rating,
        amazingness_score=score,
        quality_tier=tier,
        xp_earned=breakdown.total,
        completion_time_seconds=completion_time_seconds,
        feedback=asdict(feedback),
    )
    db.add(completion)
    await db.flush()

    xp = await apply_xp(
        db,
        user_id,
        breakdown.total,
        "lesson_completed",
        description=f"Completed lesson {completion.lesson_id} ({tier})",
    )
    await append_event(
        db,
        user_id,
        EventType.LESSON_COMPLETED,
        EventCategory.LEARNING,
        meta={
            "lesson_id": completion.lesson_id,
            "amazingness_score": score,
            "quality_tier": tier,
            "bonus_xp": breakdown.bonus,
            "xp_earned": breakdown.total,
        },
    )
    streak = await record_activity(db, user_id, activity_date or today_utc())

    result = LessonCompletionResult(
        completion=completion,
        amazingness_score=score,
        quality_tier=tier,
        xp_breakdown=breakdown,
        xp=xp,
        streak=streak,
    )

    if previous_lessons == 0:
        referral = await complete_pending_referral_for(db, user_id)
        if referral is not None:
            result.referral_completed = True
            referrer_unlocks = await unlock_achievement_if_eligible(db, referral.referrer_id)
            result.notifications.extend(referrer_unlocks.notifications)

    unlocked = await unlock_achievement_if_eligible(db, user_id, lesson=completion)
    result.achievements = [a.slug for a in unlocked.unlocked]

    minutes = round((completion_time_seconds or 0) / 60)
    result.notifications.insert(
        0,
        f"✅ <b>Lesson complete</b>\n\U0001f464 {user_id}\n\U0001f4da {html.escape(completion.lesson_id)}\n"
        f"⚡ +{breakdown.total} XP • Streak {streak.streak_days}\n"
        f"\U0001f4ca Score: {score} ({tier}) • Time: {minutes}min",
    )
    result.notifications.extend(xp.notifications)
    result.notifications.extend(unlocked.notifications)
    logger.info("Lesson %s completed by %s: score=%d xp=%d", lesson_id, user_id, score, breakdown.total)
    return result


async def list_lesson_completions(db: AsyncSession, user_id: str, limit: int = 50) -> list[LessonCompletion]:
    result = await db.execute(
        select(LessonCompletion)
        .where(LessonCompletion.user_id == user_id)
        .order_by(LessonCompletion.created_at.desc(), LessonCompletion.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
