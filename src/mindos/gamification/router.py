"""XP and streak endpoints for the signed-in user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.config import get_settings
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.gamification.level_thresholds import compute_level_progress
from mindos.gamification.schemas import (
    StreakResponse,
    XPHistoryEntry,
    XPHistoryResponse,
    XPResponse,
)
from mindos.gamification.streak_service import today_utc
from mindos.gamification.xp_service import xp_history

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


@router.get("/users/me/xp", response_model=XPResponse)
async def get_my_xp(profile: Profile = Depends(get_current_profile)):
    """Get current user's XP and level."""
    level_info = compute_level_progress(profile.total_xp, get_settings().xp_per_level)

    return XPResponse(
        total_xp=profile.total_xp,
        level=level_info["level"],
        level_title=level_info["title"],
        xp_into_level=level_info["xp_into_level"],
        xp_for_level=level_info["xp_for_level"],
        xp_to_next_level=level_info["xp_to_next_level"],
        next_level=level_info["next_level"],
        progress_percent=level_info["progress_percent"],
        weekly_xp=profile.weekly_xp,
        daily_xp=profile.daily_xp,
    )


@router.get("/users/me/xp/history", response_model=XPHistoryResponse)
async def get_xp_history(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get XP ledger history (paginated)."""
    entries, total = await xp_history(db, profile.id, page=page, per_page=per_page)

    return XPHistoryResponse(
        entries=[
            XPHistoryEntry(
                amount=e.amount,
                source=e.source,
                description=e.description,
                created_at=e.created_at,
            )
            for e in entries
        ],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/users/me/streak", response_model=StreakResponse)
async def get_my_streak(profile: Profile = Depends(get_current_profile)):
    """Get current streak info."""
    return StreakResponse(
        streak_days=profile.streak_days,
        longest_streak=profile.longest_streak,
        last_activity_date=profile.last_activity_date,
        active_today=profile.last_activity_date == today_utc(),
    )
