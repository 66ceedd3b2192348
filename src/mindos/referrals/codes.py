"""Referral code generation.

Codes are 8-character alphanumeric (A-Z, 0-9), generated server-side
with a cryptographic random source. Users cannot choose their own codes.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.db.models import Profile, Referral

REFERRAL_CHARSET = string.ascii_uppercase + string.digits
REFERRAL_CODE_LENGTH = 8


def generate_referral_code() -> str:
    return "".join(secrets.choice(REFERRAL_CHARSET) for _ in range(REFERRAL_CODE_LENGTH))


def normalize_referral_code(code: str) -> str:
    """Codes are case-insensitive; they are stored uppercase."""
    return code.strip().upper()


def is_valid_referral_code(code: str) -> bool:
    return len(code) == REFERRAL_CODE_LENGTH and all(c in REFERRAL_CHARSET for c in code)


async def generate_unique_referral_code(db: AsyncSession) -> str:
    """Generate a code not used by any profile or referral."""
    for _ in range(10):
        code = generate_referral_code()
        in_profiles = await db.execute(select(Profile.id).where(Profile.referral_code == code))
        in_referrals = await db.execute(select(Referral.id).where(Referral.ref_code == code))
        if in_profiles.first() is None and in_referrals.first() is None:
            return code
    raise RuntimeError("Failed to generate unique referral code after 10 attempts")
