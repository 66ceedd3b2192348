"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mindos.auth.jwt import verify_token
from mindos.database import get_session
from mindos.db.models import Profile
from mindos.users.service import get_or_create_profile

_bearer = HTTPBearer()
_optional_bearer = HTTPBearer(auto_error=False)


async def _profile_for_token(token: str, db: AsyncSession) -> Profile:
    try:
        payload = verify_token(token)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    metadata = payload.get("user_metadata") or {}
    profile, created = await get_or_create_profile(
        db,
        payload["sub"],
        email=payload.get("email"),
        display_name=metadata.get("full_name") if isinstance(metadata, dict) else None,
    )
    if created:
        await db.commit()
    return profile


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Profile:
    """
    Verify the bearer token and return the caller's profile.

    The identity row and profile are created on first sign-in.
    Raises 401 on an invalid token.
    """
    return await _profile_for_token(credentials.credentials, db)


async def get_optional_profile(
    credentials: HTTPAuthorizationCredentials | None = Security(_optional_bearer),
    db: AsyncSession = Depends(get_session),
) -> Profile | None:
    """Same as get_current_profile, but anonymous callers get ``None``."""
    if credentials is None:
        return None
    return await _profile_for_token(credentials.credentials, db)
