"""Achievement definitions and the pure eligibility check.

Each rule is a predicate over an ``AchievementContext`` snapshot built from
the datastore. Rules are immutable and evaluated in declaration order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class AchievementContext:
    """Progress counters a user has accumulated so far."""

    lessons_completed: int = 0
    missions_completed: int = 0
    streak_days: int = 0
    level: int = 1
    successful_referrals: int = 0
    # Latest lesson, when the evaluation was triggered by one.
    last_performance_score: int | None = None
    last_amazingness_score: int | None = None


@dataclass(frozen=True)
class Achievement:
    slug: str
    title: str
    description: str
    icon: str
    rarity: str
    xp_bonus: int
    predicate: Callable[[AchievementContext], bool]

    def as_dict(self) -> dict:
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "rarity": self.rarity,
            "xp_bonus": self.xp_bonus,
        }


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        "first_lesson", "First Steps", "Complete your first lesson", "\U0001f331", "common", 10,
        lambda c: c.lessons_completed >= 1,
    ),
    Achievement(
        "milestone_learner", "Dedicated Learner", "Complete 10 lessons", "\U0001f4da", "rare", 50,
        lambda c: c.lessons_completed >= 10,
    ),
    Achievement(
        "streak_3", "On a Roll", "Keep a 3-day streak", "\U0001f525", "common", 15,
        lambda c: c.streak_days >= 3,
    ),
    Achievement(
        "streak_7", "Weekly Warrior", "Keep a 7-day streak", "\U0001f680", "rare", 50,
        lambda c: c.streak_days >= 7,
    ),
    Achievement(
        "streak_30", "Unstoppable", "Keep a 30-day streak", "⚡", "legendary", 200,
        lambda c: c.streak_days >= 30,
    ),
    Achievement(
        "perfect_score", "Perfect Score", "Score 100 on a lesson", "\U0001f48e", "epic", 25,
        lambda c: c.last_performance_score is not None and c.last_performance_score >= 100,
    ),
    Achievement(
        "amazing_lesson", "Absolutely Amazing", "Reach an amazingness score of 130", "✨", "epic", 25,
        lambda c: c.last_amazingness_score is not None and c.last_amazingness_score >= 130,
    ),
    Achievement(
        "mission_10", "Mission Specialist", "Complete 10 missions", "\U0001f3af", "rare", 50,
        lambda c: c.missions_completed >= 10,
    ),
    Achievement(
        "level_5", "Rising Mind", "Reach level 5", "⭐", "common", 20,
        lambda c: c.level >= 5,
    ),
    Achievement(
        "level_10", "Intermediate Mind", "Reach level 10", "\U0001f31f", "rare", 50,
        lambda c: c.level >= 10,
    ),
    Achievement(
        "first_referral", "Connector", "Refer a friend who completes a lesson", "\U0001f91d", "common", 25,
        lambda c: c.successful_referrals >= 1,
    ),
)

ACHIEVEMENTS_BY_SLUG = {a.slug: a for a in ACHIEVEMENTS}


def eligible_achievements(
    context: AchievementContext,
    already_unlocked: Iterable[str] = (),
    rules: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Rules the context satisfies that have not been unlocked yet."""
    unlocked = set(already_unlocked)
    return [rule for rule in rules if rule.slug not in unlocked and rule.predicate(context)]
