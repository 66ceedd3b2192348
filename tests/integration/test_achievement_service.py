"""Achievement unlocking against the database."""

import pytest

from mindos.achievements.service import list_user_achievements, unlock_achievement_if_eligible
from mindos.db.models import Event, UserAchievement, XpEvent
from mindos.gamification.xp_service import load_profile
from tests.conftest import count_rows, make_profile


class TestUnlock:
    @pytest.mark.asyncio
    async def test_nothing_to_unlock(self, db):
        await make_profile(db, "u1")
        result = await unlock_achievement_if_eligible(db, "u1")
        assert result.unlocked == []
        assert result.notifications == []

    @pytest.mark.asyncio
    async def test_bonus_level_up_cascades(self, db):
        """streak_3 and streak_7 push 390 XP past level 5, which unlocks level_5."""
        await make_profile(db, "u1", total_xp=390, current_level=4, streak_days=7)

        result = await unlock_achievement_if_eligible(db, "u1")
        await db.commit()

        assert [a.slug for a in result.unlocked] == ["streak_3", "streak_7", "level_5"]
        profile = await load_profile(db, "u1")
        assert profile.total_xp == 390 + 15 + 50 + 20
        assert profile.current_level == 5
        assert await count_rows(db, XpEvent, XpEvent.source == "achievement_unlocked") == 3
        assert await count_rows(db, Event, Event.type == "level_up") == 1
        assert await count_rows(db, Event, Event.type == "achievement_unlocked", Event.category == "achievement") == 3
        assert await count_rows(db, Event, Event.type == "achievement_unlocked", Event.xp_impact != 0) == 0

    @pytest.mark.asyncio
    async def test_idempotent(self, db):
        await make_profile(db, "u1", streak_days=3)
        first = await unlock_achievement_if_eligible(db, "u1")
        await db.commit()
        second = await unlock_achievement_if_eligible(db, "u1")

        assert [a.slug for a in first.unlocked] == ["streak_3"]
        assert second.unlocked == []
        assert await count_rows(db, UserAchievement) == 1
        assert (await load_profile(db, "u1")).total_xp == 15

    @pytest.mark.asyncio
    async def test_notifications(self, db):
        await make_profile(db, "u1", streak_days=3)
        result = await unlock_achievement_if_eligible(db, "u1")
        assert any("On a Roll" in message for message in result.notifications)


class TestListUserAchievements:
    @pytest.mark.asyncio
    async def test_joined_with_definitions(self, db):
        await make_profile(db, "u1", streak_days=3)
        await unlock_achievement_if_eligible(db, "u1")
        await db.commit()

        rows = await list_user_achievements(db, "u1")

        assert len(rows) == 1
        assert rows[0]["slug"] == "streak_3"
        assert rows[0]["title"] == "On a Roll"
        assert rows[0]["xp_bonus"] == 15
        assert rows[0]["unlocked_at"] is not None

    @pytest.mark.asyncio
    async def test_other_users_are_separate(self, db):
        await make_profile(db, "u1", streak_days=3)
        await make_profile(db, "u2")
        await unlock_achievement_if_eligible(db, "u1")
        assert await list_user_achievements(db, "u2") == []
