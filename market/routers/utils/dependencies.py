from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, WebSocket
from sqlalchemy.orm import Session

from market.core.tokens import TokenExpiredError, TokenInvalidError, decode_access_token
from market.db import get_db
from market.models.conversation import Conversation
from market.models.user import User
from market.realtime.authenticator import ConnectionAuthenticator
from market.realtime.gateway import MessageGateway
from market.realtime.registry import ChannelRegistry
from market.services.conversation_service import ConversationService
from market.services.user_service import UserService

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency: resolve the Bearer token to a live user record."""
    authorization: Optional[str] = request.headers.get("authorization")
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Unauthorized request")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("Unauthorized request")
    try:
        claims = decode_access_token(token)
    except TokenExpiredError:
        raise _unauthorized("Session expired") from None
    except TokenInvalidError:
        raise _unauthorized("Unauthorized access") from None
    user = UserService(db).get_user(claims.user_id)
    if user is None:
        raise _unauthorized("Unauthorized request")
    return user


def get_user_by_id(
    user_id: UUID,
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency to get a user by ID."""
    user = UserService(db).get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_participant_conversation(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Conversation:
    """Conversation by ID, visible only to its participants (404 otherwise)."""
    conversation = ConversationService(db).get_conversation(conversation_id)
    if conversation is None or not conversation.has_participant(current_user.id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


def get_connection_authenticator(websocket: WebSocket) -> ConnectionAuthenticator:
    return websocket.app.state.connection_authenticator


def get_channel_registry(websocket: WebSocket) -> ChannelRegistry:
    return websocket.app.state.channel_registry


def get_message_gateway(websocket: WebSocket) -> MessageGateway:
    return websocket.app.state.message_gateway
