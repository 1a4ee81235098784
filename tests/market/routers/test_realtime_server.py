"""The chat socket served by uvicorn, seen from a standalone websockets client."""

import json
from datetime import timedelta
from uuid import uuid4

import pytest
from websockets.exceptions import ConnectionClosed
from websockets.sync.client import connect

from market.core.tokens import create_access_token


def _refusal(url: str):
    """Open url and return the close frame the server ends the connection with."""
    with connect(url, open_timeout=5) as ws:
        with pytest.raises(ConnectionClosed) as exc_info:
            ws.recv(timeout=5)
    return exc_info.value.rcvd


def test_missing_token_is_refused_with_reason(live_server):
    close = _refusal(f"{live_server}/socket-message")

    assert close.code == 4001
    assert close.reason == "unauthorized, missing credential"


def test_invalid_token_is_refused_with_reason(live_server):
    close = _refusal(f"{live_server}/socket-message?token=not.a.token")

    assert close.code == 4002
    assert close.reason == "invalid credential"


def test_expired_token_is_refused_with_reason(live_server):
    token = create_access_token(uuid4(), expires_delta=timedelta(minutes=-1))

    close = _refusal(f"{live_server}/socket-message?token={token}")

    assert close.code == 4003
    assert close.reason == "credential expired"


def test_valid_token_opens_connection(live_server):
    token = create_access_token(uuid4())

    with connect(f"{live_server}/socket-message?token={token}", open_timeout=5) as ws:
        ws.send(json.dumps({"event": "ping", "data": {"seq": 1}}))
        reply = json.loads(ws.recv(timeout=5))

    assert reply == {"event": "pong", "data": {"seq": 1}}
