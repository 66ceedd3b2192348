"""Pydantic request/response models for community submissions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SubmissionRequest(BaseModel):
    title: str
    content: str
    category: str | None = Field(None, max_length=32)


class SubmissionResponse(BaseModel):
    id: int
    title: str
    content: str
    polished: bool
    category: str
    insights: list[str] = []
    estimated_read_minutes: int
    xp_earned: int = 0
    created_at: datetime
