"""Streak tracking against the database."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from mindos.errors import InvalidInput, NotFound
from mindos.gamification.streak_service import record_activity
from mindos.gamification.xp_service import load_profile
from tests.conftest import make_profile


class TestRecordActivity:
    @pytest.mark.asyncio
    async def test_first_activity(self, db):
        await make_profile(db, "u1")

        result = await record_activity(db, "u1", date(2025, 3, 1))

        assert result.streak_days == 1
        assert result.longest_streak == 1
        assert result.last_activity_date == date(2025, 3, 1)
        assert result.changed

    @pytest.mark.asyncio
    async def test_consecutive_days_then_gap(self, db):
        await make_profile(db, "u1")
        for day in (1, 2, 3):
            await record_activity(db, "u1", date(2025, 3, day))

        result = await record_activity(db, "u1", date(2025, 3, 7))
        await db.commit()

        assert result.streak_days == 1
        assert result.longest_streak == 3
        profile = await load_profile(db, "u1")
        assert profile.last_activity_date == date(2025, 3, 7)

    @pytest.mark.asyncio
    async def test_same_day_is_a_no_op(self, db):
        await make_profile(db, "u1")
        await record_activity(db, "u1", date(2025, 3, 1))

        result = await record_activity(db, "u1", date(2025, 3, 1))

        assert result.streak_days == 1
        assert not result.changed

    @pytest.mark.asyncio
    async def test_earlier_date_does_not_rewind(self, db):
        await make_profile(db, "u1", streak_days=4, longest_streak=4, last_activity_date=date(2025, 3, 10))

        result = await record_activity(db, "u1", date(2025, 3, 8))

        assert result.streak_days == 4
        assert result.last_activity_date == date(2025, 3, 10)

    @pytest.mark.asyncio
    async def test_datetime_rejected(self, db):
        await make_profile(db, "u1")
        with pytest.raises(InvalidInput):
            await record_activity(db, "u1", datetime(2025, 3, 1, tzinfo=timezone.utc))

    @pytest.mark.asyncio
    async def test_unknown_user(self, db):
        with pytest.raises(NotFound):
            await record_activity(db, "ghost", date(2025, 3, 1))
