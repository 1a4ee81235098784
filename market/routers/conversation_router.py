"""Conversations API: open a conversation with a peer, read its history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from market.db import get_db
from market.models.conversation import Conversation
from market.models.user import User
from market.routers.utils.dependencies import (
    get_current_user,
    get_participant_conversation,
    get_user_by_id,
)
from market.schemas.conversation import (
    ChatRead,
    ConversationDetail,
    ConversationIdResponse,
    UserProfile,
)
from market.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/conversation",
    tags=["conversation"],
    responses={404: {"description": "Not found"}},
)


@router.get("/with/{user_id}", response_model=ConversationIdResponse)
def get_or_create_conversation(
    current_user: User = Depends(get_current_user),
    peer: User = Depends(get_user_by_id),
    db: Session = Depends(get_db),
) -> ConversationIdResponse:
    """Return the conversation with a peer, creating it on first contact."""
    if peer.id == current_user.id:
        raise HTTPException(
            status_code=422, detail="Cannot start a conversation with yourself"
        )
    conversation = ConversationService(db).find_or_create_conversation(
        current_user.id, peer.id
    )
    return ConversationIdResponse(conversation_id=conversation.id)


@router.get("/chats/{conversation_id}", response_model=ConversationDetail)
def get_conversation(
    conversation: Conversation = Depends(get_participant_conversation),
    current_user: User = Depends(get_current_user),
) -> ConversationDetail:
    """Full chat history of a conversation plus the other participant's profile."""
    peer = conversation.peer_of(current_user.id)
    return ConversationDetail(
        id=conversation.id,
        chats=[ChatRead.model_validate(chat) for chat in conversation.chats],
        peer_profile=UserProfile.model_validate(peer) if peer else None,
    )


@router.get("/{conversation_id}/messages", response_model=Page[ChatRead])
def list_conversation_messages(
    params: Params = Depends(),
    conversation: Conversation = Depends(get_participant_conversation),
    db: Session = Depends(get_db),
) -> Page[ChatRead]:
    """List chats of a conversation, oldest first, with pagination."""
    query = ConversationService(db).get_chats_query(conversation.id)
    return paginate(query, params=params)
