"""Pydantic request/response models for referral endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ReferralResponse(BaseModel):
    id: int
    ref_code: str
    referred_email: str | None = None
    referee_id: str | None = None
    status: str
    reward_earned: bool
    xp_reward: int
    created_at: datetime
    completed_at: datetime | None = None
    claimed_at: datetime | None = None


class ReferralListResponse(BaseModel):
    referrals: list[ReferralResponse]
    total: int


class ReferralCreateRequest(BaseModel):
    referred_email: str | None = Field(None, max_length=320)


class ReferralCodeResponse(BaseModel):
    referral_code: str


class SignupCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)


class ReferralClaimResponse(BaseModel):
    referral: ReferralResponse
    xp_earned: int
    total_xp: int
    level: int
    leveled_up: bool


class ReferralStatsResponse(BaseModel):
    total_referrals: int
    successful_referrals: int
    pending_referrals: int
    total_rewards_earned: int
    unclaimed_rewards: int
