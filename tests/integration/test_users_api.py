"""Profile, onboarding and activity-log endpoints."""

import pytest
from httpx import AsyncClient

from mindos.db.models import Profile
from tests.conftest import auth_headers, count_rows, make_token


class TestProfileEndpoints:
    @pytest.mark.asyncio
    async def test_first_request_creates_profile(self, client: AsyncClient, session_factory):
        response = await client.get("/api/v1/users/me", headers=auth_headers("u1", "ada@example.com"))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "u1"
        assert data["display_name"] == "ada"
        assert data["total_xp"] == 0
        assert data["current_level"] == 1
        assert data["level_title"]
        assert data["onboarding_completed"] is False
        async with session_factory() as s:
            assert await count_rows(s, Profile) == 1

    @pytest.mark.asyncio
    async def test_first_read_only_request_persists_profile(self, client: AsyncClient, session_factory):
        response = await client.get("/api/v1/leaderboard", headers=auth_headers("u1"))

        assert response.status_code == 200
        async with session_factory() as s:
            assert await count_rows(s, Profile, Profile.id == "u1") == 1

    @pytest.mark.asyncio
    async def test_display_name_from_token_metadata(self, client: AsyncClient):
        token = make_token("u1", "ada@example.com", user_metadata={"full_name": "Ada Lovelace"})
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["display_name"] == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient):
        token = make_token("u1", expires_in=-60)
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    @pytest.mark.asyncio
    async def test_update_display_name(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/users/me", json={"display_name": "  Grace "}, headers=auth_headers("u1")
        )
        assert response.status_code == 200
        assert response.json()["display_name"] == "Grace"

    @pytest.mark.asyncio
    async def test_update_display_name_validation(self, client: AsyncClient):
        response = await client.patch("/api/v1/users/me", json={"display_name": ""}, headers=auth_headers("u1"))
        assert response.status_code == 422


class TestPathEndpoint:
    @pytest.mark.asyncio
    async def test_onboarding_xp_once(self, client: AsyncClient, sink):
        headers = auth_headers("u1")

        first = await client.post("/api/v1/users/me/path", json={"path": "builder"}, headers=headers)
        second = await client.post("/api/v1/users/me/path", json={"path": "automator"}, headers=headers)

        assert first.status_code == 200
        assert first.json()["onboarding_xp"] == 100
        assert first.json()["profile"]["total_xp"] == 100
        assert first.json()["profile"]["onboarding_completed"] is True
        assert second.json()["onboarding_xp"] == 0
        assert second.json()["path"] == "automator"
        assert second.json()["profile"]["total_xp"] == 100
        assert any("builder path" in m for m in sink.messages)

    @pytest.mark.asyncio
    async def test_unknown_path(self, client: AsyncClient):
        response = await client.post("/api/v1/users/me/path", json={"path": "wizard"}, headers=auth_headers("u1"))
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestEventsEndpoint:
    @pytest.mark.asyncio
    async def test_lists_newest_first(self, client: AsyncClient):
        headers = auth_headers("u1")
        await client.post("/api/v1/users/me/path", json={"path": "builder"}, headers=headers)

        response = await client.get("/api/v1/users/me/events", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(data["events"])
        assert data["events"][0]["type"] in {"xp_earned", "level_up"}
        assert data["events"][-1]["type"] == "path_selected"

    @pytest.mark.asyncio
    async def test_category_filter(self, client: AsyncClient):
        headers = auth_headers("u1")
        await client.post("/api/v1/users/me/path", json={"path": "builder"}, headers=headers)

        response = await client.get("/api/v1/users/me/events?category=general", headers=headers)
        assert [e["type"] for e in response.json()["events"]] == ["path_selected"]

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me/events?category=bogus", headers=auth_headers("u1"))
        assert response.status_code == 400
