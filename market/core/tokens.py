"""Access token signing and verification (HS256 JWT with an ``id`` claim)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from pydantic import BaseModel

from market.config import get_settings


class TokenInvalidError(Exception):
    """Signature, structure or claims are not acceptable."""


class TokenExpiredError(TokenInvalidError):
    """Token verified but its ``exp`` is in the past."""


class TokenClaims(BaseModel):
    user_id: UUID
    expires_at: Optional[datetime] = None


def _get_secret_key() -> str:
    key = get_settings().secret_key
    if not key:
        raise ValueError("SECRET_KEY must be set to sign or verify access tokens")
    return key


def create_access_token(
    user_id: UUID, expires_delta: Optional[timedelta] = None
) -> str:
    """Sign an access token for user_id. Default lifetime comes from settings."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    payload = {"id": str(user_id), "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, _get_secret_key(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify token and return its claims.

    Raises:
        TokenExpiredError: signature is valid but the token has expired.
        TokenInvalidError: anything else (bad signature, malformed, missing id).
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            _get_secret_key(),
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(str(e)) from e

    raw_id = payload.get("id")
    if not raw_id:
        raise TokenInvalidError("Token has no id claim")
    try:
        user_id = UUID(str(raw_id))
    except ValueError as e:
        raise TokenInvalidError("Token id claim is not a valid id") from e

    exp = payload.get("exp")
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None
    return TokenClaims(user_id=user_id, expires_at=expires_at)
