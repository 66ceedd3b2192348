"""
Verification of access tokens issued by the identity provider.

Tokens are HS256-signed with the shared project secret and carry the user
id in ``sub``. Nothing here issues tokens.
"""

from __future__ import annotations

from typing import Any

import jwt

from mindos.config import get_settings


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Returns:
        Decoded payload dictionary with a non-empty ``sub``.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, for another
            audience, or has no subject.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if not isinstance(payload.get("sub"), str) or not payload["sub"]:
        msg = "Token has no subject"
        raise jwt.InvalidTokenError(msg)
    return payload
