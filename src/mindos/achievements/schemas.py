"""Pydantic response models for achievement endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class AchievementResponse(BaseModel):
    slug: str
    title: str
    description: str
    icon: str
    rarity: str
    xp_bonus: int


class UnlockedAchievementResponse(AchievementResponse):
    unlocked_at: datetime


class AllAchievementsResponse(BaseModel):
    achievements: list[AchievementResponse]


class UserAchievementsResponse(BaseModel):
    unlocked: list[UnlockedAchievementResponse]
    total_available: int
    total_unlocked: int
