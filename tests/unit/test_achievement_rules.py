"""Declarative achievement rules."""

from mindos.achievements.rules import (
    ACHIEVEMENTS,
    ACHIEVEMENTS_BY_SLUG,
    AchievementContext,
    eligible_achievements,
)


def _slugs(context, already=()):
    return {a.slug for a in eligible_achievements(context, already)}


class TestEligibleAchievements:
    def test_nothing_for_a_fresh_user(self):
        assert _slugs(AchievementContext()) == set()

    def test_first_lesson(self):
        assert _slugs(AchievementContext(lessons_completed=1)) == {"first_lesson"}

    def test_streak_thresholds(self):
        assert _slugs(AchievementContext(streak_days=7)) == {"streak_3", "streak_7"}
        assert "streak_30" in _slugs(AchievementContext(streak_days=30))

    def test_lesson_scores(self):
        context = AchievementContext(lessons_completed=1, last_performance_score=100, last_amazingness_score=131)
        assert _slugs(context) == {"first_lesson", "perfect_score", "amazing_lesson"}

    def test_already_unlocked_are_skipped(self):
        context = AchievementContext(lessons_completed=10)
        assert _slugs(context, already={"first_lesson"}) == {"milestone_learner"}

    def test_levels_and_referrals(self):
        context = AchievementContext(level=10, successful_referrals=1, missions_completed=10)
        assert _slugs(context) == {"level_5", "level_10", "first_referral", "mission_10"}


class TestAchievementTable:
    def test_slugs_unique(self):
        assert len(ACHIEVEMENTS_BY_SLUG) == len(ACHIEVEMENTS)

    def test_weekly_warrior_bonus(self):
        weekly = ACHIEVEMENTS_BY_SLUG["streak_7"]
        assert weekly.title == "Weekly Warrior"
        assert weekly.xp_bonus == 50

    def test_as_dict_has_no_predicate(self):
        data = ACHIEVEMENTS_BY_SLUG["first_lesson"].as_dict()
        assert set(data) == {"slug", "title", "description", "icon", "rarity", "xp_bonus"}
