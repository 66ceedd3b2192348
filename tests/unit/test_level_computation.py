"""Level computation tests: linear 100 XP levels and rank title bands."""

import pytest

from mindos.gamification.level_thresholds import compute_level_progress, level_for_xp, rank_title


class TestLevelForXp:
    """level = floor(total_xp / 100) + 1."""

    def test_level_1_at_zero_xp(self):
        assert level_for_xp(0) == 1

    def test_level_boundary_99_xp(self):
        """99 XP is still level 1."""
        assert level_for_xp(99) == 1

    def test_level_2_at_100_xp(self):
        assert level_for_xp(100) == 2

    def test_large_totals_have_no_cap(self):
        assert level_for_xp(1_000_000) == 10_001

    def test_custom_xp_per_level(self):
        assert level_for_xp(250, xp_per_level=50) == 6

    def test_negative_xp_rejected(self):
        with pytest.raises(ValueError):
            level_for_xp(-1)


class TestRankTitle:
    @pytest.mark.parametrize(
        ("level", "title"),
        [
            (1, "Beginner"),
            (9, "Beginner"),
            (10, "Intermediate"),
            (19, "Intermediate"),
            (20, "Advanced"),
            (30, "Expert"),
            (40, "Master"),
            (49, "Master"),
            (50, "Legend"),
            (120, "Legend"),
        ],
    )
    def test_bands(self, level, title):
        assert rank_title(level) == title


class TestComputeLevelProgress:
    def test_xp_into_level(self):
        result = compute_level_progress(150)  # 50 XP into level 2
        assert result["level"] == 2
        assert result["xp_into_level"] == 50
        assert result["xp_for_level"] == 100
        assert result["xp_to_next_level"] == 50
        assert result["next_level"] == 3
        assert result["progress_percent"] == 50.0

    def test_exactly_at_boundary(self):
        result = compute_level_progress(1000)
        assert result["level"] == 11
        assert result["title"] == "Intermediate"
        assert result["xp_into_level"] == 0
        assert result["xp_to_next_level"] == 100
