"""Handshake authentication for real-time connections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional
from uuid import UUID

from market.core.errors import (
    CredentialExpiredError,
    InvalidCredentialError,
    MissingCredentialError,
)
from market.core.tokens import (
    TokenClaims,
    TokenExpiredError,
    TokenInvalidError,
    decode_access_token,
)

TOKEN_QUERY_PARAM = "token"
BEARER_PREFIX = "bearer "

TokenVerifier = Callable[[str], TokenClaims]


@dataclass(frozen=True)
class ConnectionIdentity:
    """Identity attached to a connection for its whole lifetime."""

    user_id: UUID
    expires_at: Optional[datetime] = None


def extract_handshake_token(
    query_params: Mapping[str, str], headers: Mapping[str, str]
) -> Optional[str]:
    """Token from the ``token`` query parameter, else from a Bearer Authorization header."""
    token = (query_params.get(TOKEN_QUERY_PARAM) or "").strip()
    if token:
        return token
    authorization = (headers.get("authorization") or "").strip()
    if authorization.lower().startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return None


class ConnectionAuthenticator:
    """Turns a handshake token into a ConnectionIdentity or refuses it.

    Verification is purely cryptographic; no database lookup happens here.
    """

    def __init__(self, verifier: Optional[TokenVerifier] = None) -> None:
        self._verify = verifier or decode_access_token

    def authenticate(self, token: Optional[str]) -> ConnectionIdentity:
        if not token:
            raise MissingCredentialError()
        try:
            claims = self._verify(token)
        except TokenExpiredError as e:
            raise CredentialExpiredError() from e
        except TokenInvalidError as e:
            raise InvalidCredentialError() from e
        return ConnectionIdentity(user_id=claims.user_id, expires_at=claims.expires_at)
