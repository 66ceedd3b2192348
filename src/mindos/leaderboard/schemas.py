"""Pydantic response models for the leaderboard endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: str
    display_name: str | None = None
    xp: int
    level: int
    streak_days: int
    is_current_user: bool = False


class LeaderboardResponse(BaseModel):
    window: str
    entries: list[LeaderboardEntryResponse]
    own_rank: int | None = None
    population: int
