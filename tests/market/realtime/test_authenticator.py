"""Tests for handshake authentication."""

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import jwt
import pytest

from market.core.errors import (
    AuthenticationError,
    CredentialExpiredError,
    InvalidCredentialError,
    MissingCredentialError,
)
from market.core.tokens import create_access_token
from market.realtime.authenticator import (
    ConnectionAuthenticator,
    extract_handshake_token,
)


@pytest.fixture
def authenticator():
    return ConnectionAuthenticator()


def test_valid_token_yields_identity(authenticator):
    user_id = uuid4()
    identity = authenticator.authenticate(create_access_token(user_id))
    assert identity.user_id == user_id
    assert identity.expires_at is not None


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token_is_refused(authenticator, token):
    with pytest.raises(MissingCredentialError) as exc_info:
        authenticator.authenticate(token)
    assert exc_info.value.reason == "unauthorized, missing credential"


def test_missing_token_does_not_call_verifier():
    verifier = MagicMock()
    with pytest.raises(MissingCredentialError):
        ConnectionAuthenticator(verifier=verifier).authenticate(None)
    verifier.assert_not_called()


def test_bad_signature_is_invalid(authenticator):
    token = jwt.encode(
        {"id": str(uuid4())},
        "some-other-secret-key-that-is-long-enough",
        algorithm="HS256",
    )
    with pytest.raises(InvalidCredentialError) as exc_info:
        authenticator.authenticate(token)
    assert exc_info.value.reason == "invalid credential"


def test_expired_token_has_its_own_reason(authenticator):
    expired = create_access_token(uuid4(), expires_delta=timedelta(seconds=-5))
    forged = jwt.encode(
        {"id": str(uuid4())},
        "some-other-secret-key-that-is-long-enough",
        algorithm="HS256",
    )

    with pytest.raises(AuthenticationError) as expired_info:
        authenticator.authenticate(expired)
    with pytest.raises(AuthenticationError) as invalid_info:
        authenticator.authenticate(forged)

    assert isinstance(expired_info.value, CredentialExpiredError)
    assert expired_info.value.reason == "credential expired"
    assert expired_info.value.reason != invalid_info.value.reason
    assert expired_info.value.close_code != invalid_info.value.close_code


def test_extract_token_from_query_param():
    assert extract_handshake_token({"token": "abc"}, {}) == "abc"


def test_extract_token_from_bearer_header():
    headers = {"authorization": "Bearer abc.def"}
    assert extract_handshake_token({}, headers) == "abc.def"


def test_query_param_wins_over_header():
    headers = {"authorization": "Bearer from-header"}
    assert extract_handshake_token({"token": "from-query"}, headers) == "from-query"


@pytest.mark.parametrize(
    "headers", [{}, {"authorization": "Basic dXNlcjpwYXNz"}, {"authorization": "Bearer "}]
)
def test_extract_token_absent(headers):
    assert extract_handshake_token({}, headers) is None
