"""Achievement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.achievements.rules import ACHIEVEMENTS
from mindos.achievements.schemas import (
    AchievementResponse,
    AllAchievementsResponse,
    UnlockedAchievementResponse,
    UserAchievementsResponse,
)
from mindos.achievements.service import list_user_achievements
from mindos.auth.dependencies import get_current_profile
from mindos.database import get_session
from mindos.db.models import Profile

router = APIRouter(prefix="/api/v1", tags=["Achievements"])


@router.get("/achievements", response_model=AllAchievementsResponse)
async def list_achievements():
    """Get all achievement definitions."""
    return AllAchievementsResponse(achievements=[AchievementResponse(**a.as_dict()) for a in ACHIEVEMENTS])


@router.get("/users/me/achievements", response_model=UserAchievementsResponse)
async def get_my_achievements(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get the caller's unlocked achievements, newest first."""
    unlocked = await list_user_achievements(db, profile.id)
    return UserAchievementsResponse(
        unlocked=[UnlockedAchievementResponse(**row) for row in unlocked],
        total_available=len(ACHIEVEMENTS),
        total_unlocked=len(unlocked),
    )
