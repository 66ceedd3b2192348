"""Event categories and the event types the core emits."""

from __future__ import annotations

from enum import Enum


class EventCategory(str, Enum):
    GENERAL = "general"
    LEARNING = "learning"
    GAMIFICATION = "gamification"
    SOCIAL = "social"
    ACHIEVEMENT = "achievement"


class EventType(str, Enum):
    XP_EARNED = "xp_earned"
    LEVEL_UP = "level_up"
    MISSION_COMPLETED = "mission_completed"
    LESSON_COMPLETED = "lesson_completed"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    REFERRAL_COMPLETED = "referral_completed"
    REFERRAL_REWARD_CLAIMED = "referral_reward_claimed"
    PATH_SELECTED = "path_selected"
    CONTENT_SUBMITTED = "content_submitted"
