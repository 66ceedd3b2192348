"""Lesson endpoints: completion and score preview."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.clients import get_notification_sink
from mindos.config import get_settings
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.lessons.schemas import (
    FeedbackRequest,
    LessonCompleteRequest,
    LessonCompleteResponse,
    ScoreResponse,
)
from mindos.lessons.scoring import lesson_xp, quality_tier, score_completion
from mindos.lessons.service import complete_lesson
from mindos.notifications.dispatcher import dispatch_notifications
from mindos.notifications.sink import BaseNotificationSink

router = APIRouter(prefix="/api/v1/lessons", tags=["Lessons"])


@router.post("/score", response_model=ScoreResponse)
async def preview_score(body: FeedbackRequest):
    """Score feedback without recording anything."""
    feedback = body.to_feedback()
    score = score_completion(feedback)
    breakdown = lesson_xp(get_settings().lesson_base_xp, feedback.performance_score, score)
    return ScoreResponse(
        amazingness_score=score,
        quality_tier=quality_tier(score),
        base_xp=breakdown.base,
        bonus_xp=breakdown.bonus,
        total_xp=breakdown.total,
    )


@router.post("/{lesson_id}/complete", response_model=LessonCompleteResponse)
async def post_complete_lesson(
    lesson_id: str,
    body: LessonCompleteRequest,
    background_tasks: BackgroundTasks,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
    sink: BaseNotificationSink = Depends(get_notification_sink),
):
    """Record a completed lesson and award performance-scaled XP."""
    result = await complete_lesson(
        db,
        profile.id,
        lesson_id,
        body.feedback.to_feedback(),
        amazingness_rating=body.amazingness_rating,
        completion_time_seconds=body.completion_time_seconds,
        mission_id=body.mission_id,
    )
    await db.commit()
    background_tasks.add_task(dispatch_notifications, sink, result.notifications)

    return LessonCompleteResponse(
        id=result.completion.id,
        lesson_id=result.completion.lesson_id,
        amazingness_score=result.amazingness_score,
        quality_tier=result.quality_tier,
        base_xp=result.xp_breakdown.base,
        bonus_xp=result.xp_breakdown.bonus,
        xp_earned=result.xp_breakdown.total,
        total_xp=result.xp.new_total_xp,
        level=result.xp.new_level,
        leveled_up=result.xp.leveled_up,
        streak_days=result.streak.streak_days,
        referral_completed=result.referral_completed,
        achievements=result.achievements,
        created_at=result.completion.created_at,
    )
