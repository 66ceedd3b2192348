"""Pydantic request/response models for /api/v1/users endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: str
    display_name: str | None = None
    path: str | None = None
    current_level: int
    level_title: str
    total_xp: int
    weekly_xp: int
    daily_xp: int
    streak_days: int
    longest_streak: int
    last_activity_date: date | None = None
    referral_code: str | None = None
    onboarding_completed: bool
    created_at: datetime


class ProfileUpdateRequest(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=128)


class PathRequest(BaseModel):
    path: str = Field(..., description="builder, automator or dealmaker")
    quiz_answers: dict[str, Any] | None = None


class PathResponse(BaseModel):
    path: str
    onboarding_xp: int = 0
    profile: ProfileResponse


class EventResponse(BaseModel):
    id: int
    type: str
    category: str
    meta: dict[str, Any] = {}
    xp_impact: int = 0
    created_at: datetime


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    per_page: int
