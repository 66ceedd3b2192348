"""Amazingness score, quality tiers and the lesson XP bonus.

The amazingness score is additive over the lesson performance and the
learner's feedback, capped at 150:

    performance_score                      0..100
    + satisfaction_rating / 5 * 20         (1..5, optional)
    + engagement_score / 10 * 15           (1..10, optional)
    + quality_avg / 5 * 15                 (optional quality metrics)
    + 10 if would_recommend

``quality_avg`` averages clarity, usefulness and a pace score that is 5 at
the ideal pace of 3 and drops by one per step away from it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from mindos.errors import InvalidInput

MAX_SCORE = 150
AMAZING_BONUS_THRESHOLD = 110
AMAZING_BONUS_RATE = 0.5

QUALITY_TIERS: list[tuple[int, str]] = [
    (130, "Absolutely Amazing"),
    (110, "Amazing"),
    (90, "Excellent"),
    (75, "Great"),
    (60, "Good"),
]
LOWEST_TIER = "Improving"


def _check_range(name: str, value: object, low: float, high: float, *, integral: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, int if integral else (int, float)):
        msg = f"{name} must be a number, got {value!r}"
        raise InvalidInput(msg)
    if not math.isfinite(value) or not low <= value <= high:
        msg = f"{name} must be between {low:g} and {high:g}"
        raise InvalidInput(msg)


@dataclass(frozen=True)
class QualityMetrics:
    clarity: int
    usefulness: int
    pace: int
    would_recommend: bool = False

    def __post_init__(self) -> None:
        _check_range("clarity", self.clarity, 1, 5)
        _check_range("usefulness", self.usefulness, 1, 5)
        _check_range("pace", self.pace, 1, 5)
        if not isinstance(self.would_recommend, bool):
            raise InvalidInput("would_recommend must be a boolean")

    @property
    def pace_score(self) -> int:
        return 5 - abs(3 - self.pace)

    @property
    def average(self) -> float:
        return (self.clarity + self.usefulness + self.pace_score) / 3


@dataclass(frozen=True)
class CompletionFeedback:
    performance_score: float
    satisfaction_rating: int | None = None
    engagement_score: int | None = None
    quality_metrics: QualityMetrics | None = None

    def __post_init__(self) -> None:
        _check_range("performance_score", self.performance_score, 0, 100, integral=False)
        if self.satisfaction_rating is not None:
            _check_range("satisfaction_rating", self.satisfaction_rating, 1, 5)
        if self.engagement_score is not None:
            _check_range("engagement_score", self.engagement_score, 1, 10)
        if self.quality_metrics is not None and not isinstance(self.quality_metrics, QualityMetrics):
            raise InvalidInput("quality_metrics must be QualityMetrics")


@dataclass(frozen=True)
class LessonXp:
    base: int
    bonus: int

    @property
    def total(self) -> int:
        return self.base + self.bonus


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def score_completion(feedback: CompletionFeedback) -> int:
    """Composite amazingness score in 0..150."""
    total = float(feedback.performance_score)
    if feedback.satisfaction_rating is not None:
        total += feedback.satisfaction_rating / 5 * 20
    if feedback.engagement_score is not None:
        total += feedback.engagement_score / 10 * 15
    quality = feedback.quality_metrics
    if quality is not None:
        total += quality.average / 5 * 15
        if quality.would_recommend:
            total += 10
    return min(MAX_SCORE, _round_half_up(total))


def quality_tier(score: int) -> str:
    for threshold, name in QUALITY_TIERS:
        if score >= threshold:
            return name
    return LOWEST_TIER


def lesson_xp(base_xp: int, performance_score: float, amazingness_score: int) -> LessonXp:
    """Performance-scaled XP plus a 50% bonus for amazing completions."""
    if isinstance(base_xp, bool) or not isinstance(base_xp, int) or base_xp < 0:
        raise InvalidInput("base_xp must be a non-negative integer")
    base = math.floor(base_xp * performance_score / 100)
    bonus = math.floor(base * AMAZING_BONUS_RATE) if amazingness_score >= AMAZING_BONUS_THRESHOLD else 0
    return LessonXp(base=base, bonus=bonus)
