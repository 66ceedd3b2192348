"""Pydantic response models for XP and streak endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


# --- XP ---


class XPResponse(BaseModel):
    total_xp: int
    level: int
    level_title: str
    xp_into_level: int
    xp_for_level: int
    xp_to_next_level: int
    next_level: int
    progress_percent: float
    weekly_xp: int
    daily_xp: int


class XPHistoryEntry(BaseModel):
    amount: int
    source: str
    description: str | None = None
    created_at: datetime | None = None


class XPHistoryResponse(BaseModel):
    entries: list[XPHistoryEntry]
    total: int
    page: int
    per_page: int


# --- Streak ---


class StreakResponse(BaseModel):
    streak_days: int
    longest_streak: int
    last_activity_date: date | None = None
    active_today: bool
