"""Mission lifecycle and daily assignment against the database."""

from __future__ import annotations

from datetime import date

import pytest

from mindos.db.models import DailyMissionAssignment, Event, Mission, XpEvent
from mindos.errors import AlreadyCompleted, InvalidInput, MissionLocked, NotFound
from mindos.gamification.xp_service import load_profile
from mindos.missions.service import (
    complete_mission,
    create_mission,
    get_or_create_daily_mission,
    list_missions,
    mission_stats,
    mission_xp,
)
from mindos.missions.state import MissionStatus
from mindos.users.paths import UserPath
from tests.conftest import count_rows, make_profile


class TestMissionXp:
    @pytest.mark.parametrize(
        ("reward", "rating", "expected"),
        [(50, 5, 50), (50, 8, 80), (50, 1, 10), (25, 3, 15), (0, 10, 1), (1, 1, 1)],
    )
    def test_formula(self, reward, rating, expected):
        assert mission_xp(reward, rating) == expected


class TestCreateMission:
    @pytest.mark.asyncio
    async def test_defaults_to_open(self, db):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Write a prompt", xp_reward=30, difficulty_level=3)
        assert mission.status is MissionStatus.OPEN
        assert mission.completed_at is None

    @pytest.mark.asyncio
    async def test_can_start_locked(self, db):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Later", status="locked")
        assert mission.status is MissionStatus.LOCKED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"title": ""},
            {"title": "x", "difficulty_level": 11},
            {"title": "x", "difficulty_level": 0},
            {"title": "x", "xp_reward": -5},
            {"title": "x", "status": "done"},
            {"title": "x", "status": "archived"},
        ],
    )
    async def test_validation(self, db, kwargs):
        await make_profile(db, "u1")
        with pytest.raises(InvalidInput):
            await create_mission(db, "u1", **kwargs)

    @pytest.mark.asyncio
    async def test_unknown_user(self, db):
        with pytest.raises(NotFound):
            await create_mission(db, "ghost", "x")


class TestCompleteMission:
    @pytest.mark.asyncio
    async def test_open_to_done(self, db):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Ship it", xp_reward=50)
        await db.commit()

        result = await complete_mission(db, mission.id, 8, user_id="u1", activity_date=date(2025, 3, 1))
        await db.commit()

        assert result.xp_earned == 80
        assert result.mission.status is MissionStatus.DONE
        assert result.mission.completed_at is not None
        assert result.streak.streak_days == 1
        assert (await load_profile(db, "u1")).total_xp == 80
        assert await count_rows(db, XpEvent, XpEvent.source == "mission_completed") == 1
        assert await count_rows(db, Event, Event.type == "mission_completed", Event.category == "learning") == 1
        assert any("Ship it" in m for m in result.notifications)

    @pytest.mark.asyncio
    async def test_double_completion_pays_once(self, db):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Once", xp_reward=50)
        await complete_mission(db, mission.id)
        await db.commit()

        with pytest.raises(AlreadyCompleted):
            await complete_mission(db, mission.id)

        assert await count_rows(db, XpEvent, XpEvent.user_id == "u1") == 1
        assert (await load_profile(db, "u1")).total_xp == 50

    @pytest.mark.asyncio
    async def test_locked_mission(self, db):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Locked", xp_reward=50, status=MissionStatus.LOCKED)

        with pytest.raises(MissionLocked):
            await complete_mission(db, mission.id)
        assert await count_rows(db, XpEvent) == 0

    @pytest.mark.asyncio
    async def test_someone_elses_mission_is_not_found(self, db):
        await make_profile(db, "u1")
        await make_profile(db, "u2")
        mission = await create_mission(db, "u1", "Mine", xp_reward=50)

        with pytest.raises(NotFound):
            await complete_mission(db, mission.id, user_id="u2")
        assert (await list_missions(db, "u1", status="open"))[0].id == mission.id

    @pytest.mark.asyncio
    async def test_missing_mission(self, db):
        with pytest.raises(NotFound):
            await complete_mission(db, 9999)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 11, 5.5, True])
    async def test_rating_out_of_range(self, db, rating):
        await make_profile(db, "u1")
        mission = await create_mission(db, "u1", "Rate me", xp_reward=50)

        with pytest.raises(InvalidInput):
            await complete_mission(db, mission.id, rating)
        assert (await list_missions(db, "u1", status=MissionStatus.OPEN))[0].id == mission.id


class TestDailyMission:
    @pytest.mark.asyncio
    async def test_assignment_is_idempotent(self, db):
        await make_profile(db, "u1", path=UserPath.BUILDER)

        first = await get_or_create_daily_mission(db, "u1", date(2025, 1, 1))
        await db.commit()
        second = await get_or_create_daily_mission(db, "u1", date(2025, 1, 1))

        assert first.created
        assert not second.created
        assert first.template.id == "prototype_sketch"
        assert second.mission.id == first.mission.id
        assert await count_rows(db, Mission) == 1
        assert await count_rows(db, DailyMissionAssignment) == 1

    @pytest.mark.asyncio
    async def test_no_path_gets_general_template(self, db):
        await make_profile(db, "u1")
        daily = await get_or_create_daily_mission(db, "u1", date(2025, 1, 1))
        assert daily.template.id == "ai_tool_exploration"
        assert daily.mission.xp_reward == daily.template.xp_reward
        assert daily.mission.status is MissionStatus.OPEN

    @pytest.mark.asyncio
    async def test_new_day_new_mission(self, db):
        await make_profile(db, "u1")
        await get_or_create_daily_mission(db, "u1", date(2025, 1, 1))
        await get_or_create_daily_mission(db, "u1", date(2025, 1, 2))
        assert await count_rows(db, DailyMissionAssignment) == 2

    @pytest.mark.asyncio
    async def test_daily_mission_can_be_completed(self, db):
        await make_profile(db, "u1")
        daily = await get_or_create_daily_mission(db, "u1", date(2025, 1, 1))

        result = await complete_mission(db, daily.mission.id, user_id="u1")
        assert result.xp_earned == daily.template.xp_reward


class TestMissionStats:
    @pytest.mark.asyncio
    async def test_counts(self, db):
        await make_profile(db, "u1")
        done = await create_mission(db, "u1", "Done", xp_reward=20)
        await create_mission(db, "u1", "Open", xp_reward=20)
        await create_mission(db, "u1", "Locked", status="locked")
        await complete_mission(db, done.id)
        await db.commit()

        stats = await mission_stats(db, "u1")

        assert stats == {
            "open": 1,
            "locked": 1,
            "completed_today": 1,
            "total_completed": 1,
            "streak_days": 1,
            "mission_xp": 20,
        }
