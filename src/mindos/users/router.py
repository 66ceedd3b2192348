"""User profile router: all /api/v1/users/me endpoints except XP and streak."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.clients import get_notification_sink
from mindos.config import get_settings
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.errors import InvalidInput
from mindos.events.categories import EventCategory
from mindos.events.service import list_events
from mindos.gamification.level_thresholds import rank_title
from mindos.notifications.dispatcher import dispatch_notifications
from mindos.notifications.sink import BaseNotificationSink
from mindos.users.schemas import (
    EventListResponse,
    EventResponse,
    PathRequest,
    PathResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from mindos.users.service import set_user_path, update_display_name

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def profile_response(profile: Profile) -> ProfileResponse:
    """Build a ProfileResponse from a Profile model."""
    return ProfileResponse(
        id=profile.id,
        display_name=profile.display_name,
        path=profile.path.value if profile.path else None,
        current_level=profile.current_level,
        level_title=rank_title(profile.current_level),
        total_xp=profile.total_xp,
        weekly_xp=profile.weekly_xp,
        daily_xp=profile.daily_xp,
        streak_days=profile.streak_days,
        longest_streak=profile.longest_streak,
        last_activity_date=profile.last_activity_date,
        referral_code=profile.referral_code,
        onboarding_completed=profile.onboarding_completed,
        created_at=profile.created_at,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(profile: Profile = Depends(get_current_profile)):
    """Get the caller's profile (created on first sign-in)."""
    return profile_response(profile)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdateRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Update the caller's display name."""
    updated = await update_display_name(db, profile.id, body.display_name)
    await db.commit()
    return profile_response(updated)


@router.post("/me/path", response_model=PathResponse)
async def choose_path(
    body: PathRequest,
    background_tasks: BackgroundTasks,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
    sink: BaseNotificationSink = Depends(get_notification_sink),
):
    """Store the onboarding quiz result; the first call awards onboarding XP."""
    result = await set_user_path(db, profile.id, body.path, body.quiz_answers)
    await db.commit()
    background_tasks.add_task(dispatch_notifications, sink, result.notifications)

    logger.info("path_selected", user_id=profile.id, path=result.path.value)
    return PathResponse(
        path=result.path.value,
        onboarding_xp=get_settings().onboarding_xp if result.onboarding_xp is not None else 0,
        profile=profile_response(result.profile),
    )


@router.get("/me/events", response_model=EventListResponse)
async def get_my_events(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    category: str | None = Query(None),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get the caller's activity log (paginated, newest first)."""
    parsed = None
    if category is not None:
        try:
            parsed = EventCategory(category)
        except ValueError as e:
            msg = f"Unknown event category: {category}"
            raise InvalidInput(msg) from e

    events, total = await list_events(db, profile.id, page=page, per_page=per_page, category=parsed)
    return EventListResponse(
        events=[
            EventResponse(
                id=e.id,
                type=e.type,
                category=e.category,
                meta=e.meta or {},
                xp_impact=e.xp_impact,
                created_at=e.created_at,
            )
            for e in events
        ],
        total=total,
        page=page,
        per_page=per_page,
    )
