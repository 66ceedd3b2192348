"""Leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.config import get_settings
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.leaderboard.schemas import LeaderboardEntryResponse, LeaderboardResponse
from mindos.leaderboard.service import get_leaderboard

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    window: str = Query("global", description="daily, weekly or global"),
    limit: int | None = Query(None, ge=1, le=100),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Top users for a window plus the caller's own rank."""
    ranking = await get_leaderboard(
        db,
        window,
        requesting_user_id=profile.id,
        limit=limit or get_settings().leaderboard_page_size,
    )
    return LeaderboardResponse(
        window=ranking.window.value,
        entries=[
            LeaderboardEntryResponse(
                rank=e.rank,
                user_id=e.user.user_id,
                display_name=e.user.display_name,
                xp=e.xp,
                level=e.user.level,
                streak_days=e.user.streak_days,
                is_current_user=e.user.user_id == profile.id,
            )
            for e in ranking.entries
        ],
        own_rank=ranking.own_rank,
        population=ranking.population,
    )
