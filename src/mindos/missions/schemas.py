"""Pydantic request/response models for mission endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class MissionResponse(BaseModel):
    id: int
    template_id: str | None = None
    title: str
    description: str
    category: str
    difficulty_level: int
    xp_reward: int
    status: str
    created_at: datetime
    completed_at: datetime | None = None


class MissionListResponse(BaseModel):
    missions: list[MissionResponse]
    total: int


class MissionCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    xp_reward: int = Field(0, ge=0)
    difficulty_level: int = Field(1, ge=1, le=10)
    category: str = Field("general", min_length=1, max_length=32)
    status: str = "open"


class DailyMissionResponse(BaseModel):
    assigned_date: date
    estimated_time: str
    difficulty: str
    path_specific: list[str] = []
    mission: MissionResponse


class MissionCompleteRequest(BaseModel):
    amazingness_rating: int = Field(5, description="Self-rated quality, 1-10")


class MissionCompleteResponse(BaseModel):
    mission: MissionResponse
    xp_earned: int
    total_xp: int
    level: int
    leveled_up: bool
    streak_days: int
    achievements: list[str] = []


class MissionStatsResponse(BaseModel):
    open: int
    locked: int
    completed_today: int
    total_completed: int
    streak_days: int
    mission_xp: int
