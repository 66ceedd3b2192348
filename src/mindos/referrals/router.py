"""Referral endpoints: codes, invitations, signup, cancellation and reward claims."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.dependencies import get_current_profile
from mindos.clients import get_notification_sink
from mindos.database import get_session
from mindos.db.models import Profile, Referral
from mindos.notifications.dispatcher import dispatch_notifications
from mindos.notifications.sink import BaseNotificationSink
from mindos.referrals.schemas import (
    ReferralClaimResponse,
    ReferralCodeResponse,
    ReferralCreateRequest,
    ReferralListResponse,
    ReferralResponse,
    ReferralStatsResponse,
    SignupCodeRequest,
)
from mindos.referrals.service import (
    cancel_referral,
    claim_referral_reward,
    create_referral,
    get_or_create_referral_code,
    list_referrals,
    referral_stats,
    register_signup_code,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/referrals", tags=["Referrals"])


def _referral_response(referral: Referral) -> ReferralResponse:
    return ReferralResponse(
        id=referral.id,
        ref_code=referral.ref_code,
        referred_email=referral.referred_email,
        referee_id=referral.referee_id,
        status=referral.status.value,
        reward_earned=referral.reward_earned,
        xp_reward=referral.xp_reward,
        created_at=referral.created_at,
        completed_at=referral.completed_at,
        claimed_at=referral.claimed_at,
    )


@router.get("", response_model=ReferralListResponse)
async def get_my_referrals(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """List referrals the caller has made, newest first."""
    referrals = await list_referrals(db, profile.id)
    return ReferralListResponse(referrals=[_referral_response(r) for r in referrals], total=len(referrals))


@router.post("", response_model=ReferralResponse, status_code=201)
async def post_referral(
    body: ReferralCreateRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Create a pending referral with its own invite code."""
    referral = await create_referral(db, profile.id, body.referred_email)
    await db.commit()
    return _referral_response(referral)


@router.get("/code", response_model=ReferralCodeResponse)
async def get_my_code(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Get the caller's shareable referral code, generating it on first use."""
    code = await get_or_create_referral_code(db, profile.id)
    await db.commit()
    return ReferralCodeResponse(referral_code=code)


@router.get("/stats", response_model=ReferralStatsResponse)
async def get_my_referral_stats(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Referral counts and reward totals for the caller."""
    return ReferralStatsResponse(**await referral_stats(db, profile.id))


@router.post("/signup", response_model=ReferralResponse)
async def post_signup_code(
    body: SignupCodeRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Attach the caller to a referral; it completes on their first lesson."""
    referral = await register_signup_code(db, profile.id, body.code)
    await db.commit()
    logger.info("referral_signup", user_id=profile.id, referral_id=referral.id)
    return _referral_response(referral)


@router.post("/{referral_id}/claim", response_model=ReferralClaimResponse)
async def post_claim_reward(
    referral_id: int,
    background_tasks: BackgroundTasks,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
    sink: BaseNotificationSink = Depends(get_notification_sink),
):
    """Claim the XP reward for a completed referral (once)."""
    result = await claim_referral_reward(db, referral_id, user_id=profile.id)
    await db.commit()
    background_tasks.add_task(dispatch_notifications, sink, result.notifications)

    return ReferralClaimResponse(
        referral=_referral_response(result.referral),
        xp_earned=result.xp_earned,
        total_xp=result.xp.new_total_xp,
        level=result.xp.new_level,
        leveled_up=result.xp.leveled_up,
    )


@router.post("/{referral_id}/cancel", response_model=ReferralResponse)
async def post_cancel_referral(
    referral_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_session),
):
    """Cancel a pending referral."""
    referral = await cancel_referral(db, referral_id, profile.id)
    await db.commit()
    return _referral_response(referral)
