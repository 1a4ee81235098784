"""
Real-time chat socket.

Clients connect to /socket-message with their access token in the handshake
(``?token=`` or an ``Authorization: Bearer`` header). A refused handshake
is accepted and closed at once with a close code and reason string, before
any frame is read or the connection is registered. Accepted connections
exchange JSON frames ``{"event": ..., "data": ...}``; see market.schemas.chat_event.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from market.core.errors import AuthenticationError
from market.realtime.authenticator import (
    ConnectionAuthenticator,
    extract_handshake_token,
)
from market.realtime.channel import WebSocketChannel
from market.realtime.gateway import MessageGateway
from market.realtime.registry import ChannelRegistry
from market.routers.utils.dependencies import (
    get_channel_registry,
    get_connection_authenticator,
    get_message_gateway,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/socket-message")
async def chat_socket(
    websocket: WebSocket,
    authenticator: ConnectionAuthenticator = Depends(get_connection_authenticator),
    registry: ChannelRegistry = Depends(get_channel_registry),
    gateway: MessageGateway = Depends(get_message_gateway),
) -> None:
    token = extract_handshake_token(websocket.query_params, websocket.headers)
    try:
        identity = authenticator.authenticate(token)
    except AuthenticationError as e:
        logger.info("Refused chat socket: %s", e.reason)
        # Servers answer a close before accept with a bare HTTP 403, which
        # drops the close code and reason
        await websocket.accept()
        await websocket.close(code=e.close_code, reason=e.reason)
        return

    await websocket.accept()
    channel = WebSocketChannel(websocket)
    await registry.register(identity.user_id, channel)
    logger.info("Chat socket %s opened for user %s", channel.id, identity.user_id)
    try:
        while True:
            raw = await websocket.receive_text()
            reply = await gateway.dispatch(identity.user_id, raw)
            if reply is not None:
                await websocket.send_json(reply.model_dump())
    except WebSocketDisconnect:
        pass
    finally:
        await registry.unregister(channel)
        logger.info("Chat socket %s closed for user %s", channel.id, identity.user_id)
