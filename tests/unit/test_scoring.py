"""Amazingness score, quality tiers and lesson XP."""

import pytest

from mindos.errors import InvalidInput
from mindos.lessons.scoring import (
    CompletionFeedback,
    LessonXp,
    QualityMetrics,
    lesson_xp,
    quality_tier,
    score_completion,
)


class TestScoreCompletion:
    def test_capped_at_150(self):
        """98 + 20 + 15 + 15 + 10 = 158 -> 150."""
        feedback = CompletionFeedback(
            performance_score=98,
            satisfaction_rating=5,
            engagement_score=10,
            quality_metrics=QualityMetrics(clarity=5, usefulness=5, pace=3, would_recommend=True),
        )
        assert score_completion(feedback) == 150

    def test_partial_quality(self):
        """87 + 16 + 12 + 14 + 10 = 139."""
        feedback = CompletionFeedback(
            performance_score=87,
            satisfaction_rating=4,
            engagement_score=8,
            quality_metrics=QualityMetrics(clarity=4, usefulness=5, pace=3, would_recommend=True),
        )
        score = score_completion(feedback)
        assert score == 139
        assert quality_tier(score) == "Absolutely Amazing"

    def test_performance_only(self):
        assert score_completion(CompletionFeedback(performance_score=72)) == 72

    def test_half_rounds_up(self):
        assert score_completion(CompletionFeedback(performance_score=72.5)) == 73

    def test_pace_away_from_ideal_scores_lower(self):
        ideal = QualityMetrics(clarity=3, usefulness=3, pace=3)
        rushed = QualityMetrics(clarity=3, usefulness=3, pace=5)
        assert ideal.pace_score == 5
        assert rushed.pace_score == 3
        assert score_completion(CompletionFeedback(50, quality_metrics=ideal)) > score_completion(
            CompletionFeedback(50, quality_metrics=rushed)
        )

    def test_zero_performance(self):
        assert score_completion(CompletionFeedback(performance_score=0)) == 0


class TestFeedbackValidation:
    @pytest.mark.parametrize("performance", [-1, 100.5, float("nan"), True])
    def test_performance_out_of_range(self, performance):
        with pytest.raises(InvalidInput):
            CompletionFeedback(performance_score=performance)

    def test_satisfaction_out_of_range(self):
        with pytest.raises(InvalidInput):
            CompletionFeedback(performance_score=50, satisfaction_rating=6)

    def test_engagement_out_of_range(self):
        with pytest.raises(InvalidInput):
            CompletionFeedback(performance_score=50, engagement_score=0)

    def test_quality_metric_out_of_range(self):
        with pytest.raises(InvalidInput):
            QualityMetrics(clarity=0, usefulness=3, pace=3)


class TestQualityTier:
    @pytest.mark.parametrize(
        ("score", "tier"),
        [
            (150, "Absolutely Amazing"),
            (130, "Absolutely Amazing"),
            (129, "Amazing"),
            (110, "Amazing"),
            (90, "Excellent"),
            (75, "Great"),
            (60, "Good"),
            (59, "Improving"),
            (0, "Improving"),
        ],
    )
    def test_boundaries(self, score, tier):
        assert quality_tier(score) == tier


class TestLessonXp:
    def test_scaled_by_performance(self):
        assert lesson_xp(100, 80, 95) == LessonXp(base=80, bonus=0)

    def test_bonus_at_threshold(self):
        xp = lesson_xp(100, 87, 110)
        assert xp.base == 87
        assert xp.bonus == 43
        assert xp.total == 130

    def test_no_bonus_just_below_threshold(self):
        assert lesson_xp(100, 87, 109).bonus == 0

    def test_negative_base_rejected(self):
        with pytest.raises(InvalidInput):
            lesson_xp(-10, 50, 50)
