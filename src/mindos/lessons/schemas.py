"""Pydantic request/response models for lesson endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from mindos.lessons.scoring import CompletionFeedback, QualityMetrics


class QualityMetricsRequest(BaseModel):
    clarity: int
    usefulness: int
    pace: int
    would_recommend: bool = False


class FeedbackRequest(BaseModel):
    performance_score: float
    satisfaction_rating: int | None = None
    engagement_score: int | None = None
    quality_metrics: QualityMetricsRequest | None = None

    def to_feedback(self) -> CompletionFeedback:
        """Convert to the domain value; raises InvalidInput on out-of-range values."""
        quality = None
        if self.quality_metrics is not None:
            quality = QualityMetrics(**self.quality_metrics.model_dump())
        return CompletionFeedback(
            performance_score=self.performance_score,
            satisfaction_rating=self.satisfaction_rating,
            engagement_score=self.engagement_score,
            quality_metrics=quality,
        )


class LessonCompleteRequest(BaseModel):
    feedback: FeedbackRequest
    amazingness_rating: int | None = None
    completion_time_seconds: int | None = None
    mission_id: int | None = None


class ScoreResponse(BaseModel):
    amazingness_score: int
    quality_tier: str
    base_xp: int
    bonus_xp: int
    total_xp: int


class LessonCompleteResponse(BaseModel):
    id: int
    lesson_id: str
    amazingness_score: int
    quality_tier: str
    base_xp: int
    bonus_xp: int
    xp_earned: int
    total_xp: int
    level: int
    leveled_up: bool
    streak_days: int
    referral_completed: bool = False
    achievements: list[str] = []
    created_at: datetime
