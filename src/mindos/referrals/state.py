"""Referral lifecycle states.

    pending --complete--> completed --claim--> (reward_earned = true)
    pending --cancel----> cancelled

``completed`` and ``cancelled`` are terminal for ``status``; the reward flag
can only flip once, and only on a completed referral.
"""

from __future__ import annotations

from enum import Enum

from mindos.errors import AlreadyClaimed, NotClaimable


class ReferralStatus(str, Enum):
    """Closed set of referral states."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[ReferralStatus, frozenset[ReferralStatus]] = {
    ReferralStatus.PENDING: frozenset({ReferralStatus.COMPLETED, ReferralStatus.CANCELLED}),
    ReferralStatus.COMPLETED: frozenset(),
    ReferralStatus.CANCELLED: frozenset(),
}


def transition(current: ReferralStatus, target: ReferralStatus) -> ReferralStatus:
    """Validate a status change and return the new status."""
    if target not in ALLOWED_TRANSITIONS[current]:
        msg = f"Referral cannot move from {current.value} to {target.value}"
        raise NotClaimable(msg)
    return target


def ensure_claimable(status: ReferralStatus, reward_earned: bool) -> None:
    """Raise unless the referral reward can be claimed right now."""
    if status is ReferralStatus.COMPLETED and reward_earned:
        raise AlreadyClaimed("Referral reward already claimed")
    if status is not ReferralStatus.COMPLETED:
        msg = f"Referral is {status.value}; only completed referrals can be claimed"
        raise NotClaimable(msg)
