"""Tests for access token signing and verification."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from market.core.tokens import (
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_access_token,
)


def test_decode_returns_user_id():
    user_id = uuid4()
    claims = decode_access_token(create_access_token(user_id))
    assert claims.user_id == user_id
    assert claims.expires_at is not None


def test_expired_token_raises_expired():
    token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-30))
    with pytest.raises(TokenExpiredError):
        decode_access_token(token)


def test_wrong_signature_is_invalid_not_expired():
    token = jwt.encode(
        {"id": str(uuid4())},
        "another-secret-key-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError) as exc_info:
        decode_access_token(token)
    assert not isinstance(exc_info.value, TokenExpiredError)


def test_garbage_token_is_invalid():
    with pytest.raises(TokenInvalidError):
        decode_access_token("not-a-jwt")


def test_token_without_id_claim_is_invalid():
    token = jwt.encode(
        {"sub": "someone"},
        "test-secret-key-with-enough-length-for-hs256-signing",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError, match="id claim"):
        decode_access_token(token)


def test_token_with_malformed_id_is_invalid():
    token = jwt.encode(
        {"id": "12345"},
        "test-secret-key-with-enough-length-for-hs256-signing",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        decode_access_token(token)


def test_missing_secret_key_raises(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValueError, match="SECRET_KEY"):
        create_access_token(uuid4())
