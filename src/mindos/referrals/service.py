"""Referral lifecycle: codes, signup, completion, cancellation and reward claims."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.config import get_settings
from mindos.db.models import Profile, Referral
from mindos.errors import InvalidInput, NotFound
from mindos.events.categories import EventCategory, EventType
from mindos.events.service import append_event
from mindos.gamification.xp_service import XpResult, apply_xp, load_profile
from mindos.referrals.codes import (
    generate_unique_referral_code,
    is_valid_referral_code,
    normalize_referral_code,
)
from mindos.referrals.state import ReferralStatus, ensure_claimable, transition

logger = logging.getLogger(__name__)


@dataclass
class ReferralClaimResult:
    referral: Referral
    xp_earned: int
    xp: XpResult
    notifications: list[str] = field(default_factory=list)


async def get_referral(db: AsyncSession, referral_id: int, user_id: str | None = None) -> Referral:
    """Fetch a referral; only its referrer may see it when ``user_id`` is given."""
    stmt = select(Referral).where(Referral.id == referral_id).execution_options(populate_existing=True)
    referral = (await db.execute(stmt)).scalar_one_or_none()
    if referral is None or (user_id is not None and referral.referrer_id != user_id):
        msg = f"Referral {referral_id} not found"
        raise NotFound(msg)
    return referral


async def _referral_by_code(db: AsyncSession, ref_code: str) -> Referral | None:
    stmt = select(Referral).where(Referral.ref_code == ref_code).execution_options(populate_existing=True)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_or_create_referral_code(db: AsyncSession, user_id: str) -> str:
    """The user's shareable profile code, generated on first request."""
    profile = await load_profile(db, user_id)
    if profile.referral_code is None:
        profile.referral_code = await generate_unique_referral_code(db)
        await db.flush()
        logger.info("Generated referral code for user %s", user_id)
    return profile.referral_code


async def list_referrals(db: AsyncSession, user_id: str) -> list[Referral]:
    result = await db.execute(
        select(Referral)
        .where(Referral.referrer_id == user_id)
        .order_by(Referral.created_at.desc(), Referral.id.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_referral(db: AsyncSession, referrer_id: str, referred_email: str | None = None) -> Referral:
    """Create a pending referral with its own unique code."""
    await load_profile(db, referrer_id)
    email = referred_email.strip().lower() if referred_email else None

    if email:
        duplicate = await db.execute(
            select(Referral.id).where(Referral.referrer_id == referrer_id, Referral.referred_email == email)
        )
        if duplicate.first() is not None:
            raise InvalidInput("Referral already exists")

    referral = Referral(
        ref_code=await generate_unique_referral_code(db),
        referrer_id=referrer_id,
        referred_email=email,
        status=ReferralStatus.PENDING,
        xp_reward=get_settings().referral_reward_xp,
    )
    db.add(referral)
    await db.flush()
    return referral


async def register_signup_code(db: AsyncSession, user_id: str, code: str) -> Referral:
    """Attach a new user to the referral behind ``code``.

    ``code`` may be a referral's own code or a referrer's profile code; in the
    latter case a fresh pending referral is opened for that referrer. The
    referral stays pending until the new user completes a first lesson.
    """
    normalized = normalize_referral_code(code)
    if not is_valid_referral_code(normalized):
        raise InvalidInput("Malformed referral code")

    profile = await load_profile(db, user_id)
    if profile.referred_by_code:
        raise InvalidInput("User was already referred")

    referral = await _referral_by_code(db, normalized)
    if referral is None:
        owner = await db.execute(select(Profile.id).where(Profile.referral_code == normalized))
        referrer_id = owner.scalar_one_or_none()
        if referrer_id is None:
            msg = f"Unknown referral code {normalized}"
            raise NotFound(msg)
        if referrer_id == user_id:
            raise InvalidInput("Users cannot refer themselves")
        referral = await create_referral(db, referrer_id)
    else:
        if referral.referrer_id == user_id:
            raise InvalidInput("Users cannot refer themselves")
        if referral.status is not ReferralStatus.PENDING:
            transition(referral.status, ReferralStatus.COMPLETED)

    profile.referred_by_code = referral.ref_code
    await db.flush()
    return referral


async def complete_referral(db: AsyncSession, ref_code: str, referee_id: str) -> Referral:
    """pending -> completed once the referee qualifies (first lesson)."""
    normalized = normalize_referral_code(ref_code)
    now = datetime.now(timezone.utc)

    row = (
        await db.execute(
            update(Referral)
            .where(
                Referral.ref_code == normalized,
                Referral.status == ReferralStatus.PENDING,
                Referral.referrer_id != referee_id,
            )
            .values(status=ReferralStatus.COMPLETED, referee_id=referee_id, completed_at=now)
            .returning(Referral.id, Referral.referrer_id)
            .execution_options(synchronize_session=False)
        )
    ).one_or_none()

    if row is None:
        referral = await _referral_by_code(db, normalized)
        if referral is None:
            msg = f"Unknown referral code {normalized}"
            raise NotFound(msg)
        if referral.referrer_id == referee_id:
            raise InvalidInput("Users cannot refer themselves")
        transition(referral.status, ReferralStatus.COMPLETED)
        msg = f"Referral {normalized} could not be completed"
        raise InvalidInput(msg)

    referral_id, referrer_id = row
    await append_event(
        db,
        referrer_id,
        EventType.REFERRAL_COMPLETED,
        EventCategory.SOCIAL,
        meta={"referral_id": referral_id, "referee_id": referee_id},
    )
    logger.info("Referral %s completed by %s", referral_id, referee_id)
    return await get_referral(db, referral_id)


async def complete_pending_referral_for(db: AsyncSession, referee_id: str) -> Referral | None:
    """Complete the referral a user signed up with, if it is still pending."""
    profile = await load_profile(db, referee_id)
    if not profile.referred_by_code:
        return None
    referral = await _referral_by_code(db, profile.referred_by_code)
    if referral is None or referral.status is not ReferralStatus.PENDING:
        return None
    return await complete_referral(db, referral.ref_code, referee_id)


async def cancel_referral(db: AsyncSession, referral_id: int, user_id: str) -> Referral:
    """pending -> cancelled, by the referrer only."""
    row = (
        await db.execute(
            update(Referral)
            .where(
                Referral.id == referral_id,
                Referral.referrer_id == user_id,
                Referral.status == ReferralStatus.PENDING,
            )
            .values(status=ReferralStatus.CANCELLED)
            .returning(Referral.id)
            .execution_options(synchronize_session=False)
        )
    ).one_or_none()
    if row is None:
        referral = await get_referral(db, referral_id, user_id)
        transition(referral.status, ReferralStatus.CANCELLED)
    return await get_referral(db, referral_id)


async def claim_referral_reward(
    db: AsyncSession,
    referral_id: int,
    user_id: str | None = None,
) -> ReferralClaimResult:
    """Flip ``reward_earned`` and pay the referrer.

    Guarded by ``UPDATE ... WHERE status = 'completed' AND NOT reward_earned``
    so a reward is paid at most once even under concurrent claims.
    """
    now = datetime.now(timezone.utc)
    stmt = update(Referral).where(
        Referral.id == referral_id,
        Referral.status == ReferralStatus.COMPLETED,
        Referral.reward_earned == False,  # noqa: E712
    )
    if user_id is not None:
        stmt = stmt.where(Referral.referrer_id == user_id)
    row = (
        await db.execute(
            stmt.values(reward_earned=True, claimed_at=now)
            .returning(Referral.referrer_id, Referral.xp_reward)
            .execution_options(synchronize_session=False)
        )
    ).one_or_none()

    if row is None:
        referral = await get_referral(db, referral_id, user_id)
        ensure_claimable(referral.status, referral.reward_earned)
        msg = f"Referral {referral_id} could not be claimed"
        raise InvalidInput(msg)

    referrer_id, xp_reward = row
    xp = await apply_xp(db, referrer_id, xp_reward, "referral_reward", description="Referral reward")
    await append_event(
        db,
        referrer_id,
        EventType.REFERRAL_REWARD_CLAIMED,
        EventCategory.SOCIAL,
        meta={"referral_id": referral_id, "xp_reward": xp_reward},
    )

    result = ReferralClaimResult(
        referral=await get_referral(db, referral_id),
        xp_earned=xp_reward,
        xp=xp,
    )
    result.notifications.append(f"\U0001f91d <b>Referral reward claimed</b> by user {referrer_id} (+{xp_reward} XP)")
    result.notifications.extend(xp.notifications)
    return result


async def referral_stats(db: AsyncSession, user_id: str) -> dict:
    referrals = await list_referrals(db, user_id)
    completed = [r for r in referrals if r.status is ReferralStatus.COMPLETED]
    return {
        "total_referrals": len(referrals),
        "successful_referrals": len(completed),
        "pending_referrals": sum(1 for r in referrals if r.status is ReferralStatus.PENDING),
        "total_rewards_earned": sum(r.xp_reward for r in completed if r.reward_earned),
        "unclaimed_rewards": sum(r.xp_reward for r in completed if not r.reward_earned),
    }
