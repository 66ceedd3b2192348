"""Referral flow across users: invite, signup, first lesson, claim."""

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers

LESSON = {"feedback": {"performance_score": 70}}


class TestReferralFlow:
    @pytest.mark.asyncio
    async def test_invite_signup_lesson_claim(self, client: AsyncClient, sink):
        referrer = auth_headers("referrer")
        friend = auth_headers("friend")

        created = await client.post("/api/v1/referrals", json={"referred_email": "friend@example.com"}, headers=referrer)
        assert created.status_code == 201
        referral = created.json()
        assert referral["status"] == "pending"

        early = await client.post(f"/api/v1/referrals/{referral['id']}/claim", headers=referrer)
        assert early.status_code == 409
        assert early.json()["code"] == "not_claimable"

        signup = await client.post("/api/v1/referrals/signup", json={"code": referral["ref_code"]}, headers=friend)
        assert signup.status_code == 200
        assert signup.json()["id"] == referral["id"]

        lesson = await client.post("/api/v1/lessons/l1/complete", json=LESSON, headers=friend)
        assert lesson.json()["referral_completed"] is True

        claim = await client.post(f"/api/v1/referrals/{referral['id']}/claim", headers=referrer)
        assert claim.status_code == 200
        assert claim.json()["xp_earned"] == 50
        assert claim.json()["referral"]["reward_earned"] is True
        # first_referral bonus (25) plus the claimed reward
        assert claim.json()["total_xp"] == 75

        again = await client.post(f"/api/v1/referrals/{referral['id']}/claim", headers=referrer)
        assert again.status_code == 409
        assert again.json()["code"] == "already_claimed"

        stats = (await client.get("/api/v1/referrals/stats", headers=referrer)).json()
        assert stats["successful_referrals"] == 1
        assert stats["total_rewards_earned"] == 50
        assert stats["unclaimed_rewards"] == 0

    @pytest.mark.asyncio
    async def test_profile_code(self, client: AsyncClient):
        first = await client.get("/api/v1/referrals/code", headers=auth_headers("referrer"))
        second = await client.get("/api/v1/referrals/code", headers=auth_headers("referrer"))
        assert first.json()["referral_code"] == second.json()["referral_code"]

        signup = await client.post(
            "/api/v1/referrals/signup", json={"code": first.json()["referral_code"]}, headers=auth_headers("friend")
        )
        assert signup.status_code == 200
        listed = await client.get("/api/v1/referrals", headers=auth_headers("referrer"))
        assert listed.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_own_code_rejected(self, client: AsyncClient):
        code = (await client.get("/api/v1/referrals/code", headers=auth_headers("u1"))).json()["referral_code"]
        response = await client.post("/api/v1/referrals/signup", json={"code": code}, headers=auth_headers("u1"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient):
        headers = auth_headers("referrer")
        created = await client.post("/api/v1/referrals", json={}, headers=headers)
        referral_id = created.json()["id"]

        cancelled = await client.post(f"/api/v1/referrals/{referral_id}/cancel", headers=headers)
        assert cancelled.json()["status"] == "cancelled"

        again = await client.post(f"/api/v1/referrals/{referral_id}/cancel", headers=headers)
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_claim_other_users_referral(self, client: AsyncClient):
        created = await client.post("/api/v1/referrals", json={}, headers=auth_headers("referrer"))
        response = await client.post(f"/api/v1/referrals/{created.json()['id']}/claim", headers=auth_headers("other"))
        assert response.status_code == 404
