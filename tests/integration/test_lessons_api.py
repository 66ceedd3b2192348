"""Lesson scoring preview and completion endpoints."""

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers

AMAZING_FEEDBACK = {
    "performance_score": 87,
    "satisfaction_rating": 4,
    "engagement_score": 8,
    "quality_metrics": {"clarity": 4, "usefulness": 5, "pace": 3, "would_recommend": True},
}


class TestScorePreview:
    @pytest.mark.asyncio
    async def test_preview_does_not_need_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/lessons/score", json=AMAZING_FEEDBACK)

        assert response.status_code == 200
        assert response.json() == {
            "amazingness_score": 139,
            "quality_tier": "Absolutely Amazing",
            "base_xp": 87,
            "bonus_xp": 43,
            "total_xp": 130,
        }

    @pytest.mark.asyncio
    async def test_out_of_range_feedback(self, client: AsyncClient):
        response = await client.post("/api/v1/lessons/score", json={"performance_score": 101})
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestCompleteLesson:
    @pytest.mark.asyncio
    async def test_completion(self, client: AsyncClient, sink):
        headers = auth_headers("u1")
        response = await client.post(
            "/api/v1/lessons/prompt-basics/complete",
            json={"feedback": AMAZING_FEEDBACK, "amazingness_rating": 9, "completion_time_seconds": 420},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["lesson_id"] == "prompt-basics"
        assert data["amazingness_score"] == 139
        assert data["xp_earned"] == 130
        assert data["bonus_xp"] == 43
        assert data["streak_days"] == 1
        assert data["achievements"] == ["first_lesson", "amazing_lesson"]
        assert data["referral_completed"] is False
        assert any("prompt-basics" in m for m in sink.messages)

        me = await client.get("/api/v1/users/me", headers=headers)
        assert me.json()["total_xp"] == 165

    @pytest.mark.asyncio
    async def test_failing_sink_does_not_fail_request(self, client: AsyncClient, sink):
        sink.fail = True
        response = await client.post(
            "/api/v1/lessons/l1/complete", json={"feedback": {"performance_score": 70}}, headers=auth_headers("u1")
        )
        assert response.status_code == 200
        assert sink.messages == []

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/lessons/l1/complete", json={"feedback": {"performance_score": 70}})
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_foreign_mission_id(self, client: AsyncClient):
        created = await client.post("/api/v1/missions", json={"title": "Theirs"}, headers=auth_headers("u2"))
        response = await client.post(
            "/api/v1/lessons/l1/complete",
            json={"feedback": {"performance_score": 70}, "mission_id": created.json()["id"]},
            headers=auth_headers("u1"),
        )
        assert response.status_code == 404
