"""
Conversation store: pairwise conversations and their append-only chat history.

Creation is an upsert on ``participant_id`` so concurrent first-contact
requests from either side end up with the same row. Appends lock the
conversation row before inserting.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Query, Session

from market.core.errors import ConversationNotFoundError, RecipientNotFoundError
from market.models.conversation import (
    Chat,
    Conversation,
    build_participant_id,
    sort_participants,
)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class ConversationService:
    """Create conversations, append chats, read history."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_conversation(self, conversation_id: UUID) -> Optional[Conversation]:
        """Fetch a conversation by ID."""
        return (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .first()
        )

    def get_conversation_by_participants(
        self, first: UUID, second: UUID
    ) -> Optional[Conversation]:
        """Fetch the conversation between two users, in either order."""
        participant_id = build_participant_id(first, second)
        return (
            self.db.query(Conversation)
            .filter(Conversation.participant_id == participant_id)
            .first()
        )

    def find_or_create_conversation(self, first: UUID, second: UUID) -> Conversation:
        """
        Return the conversation between two users, creating it if needed.

        Idempotent and order-independent: (A, B) and (B, A) resolve to the same
        row, and racing callers never create a duplicate.
        """
        if first == second:
            raise ValueError("A conversation needs two different participants")
        low, high = sort_participants(first, second)
        participant_id = build_participant_id(first, second)
        now = datetime.now(timezone.utc)

        insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
        if insert is None:
            existing = self.get_conversation_by_participants(first, second)
            if existing is not None:
                return existing
            self.db.add(
                Conversation(
                    participant_id=participant_id,
                    first_participant_id=low,
                    second_participant_id=high,
                )
            )
        else:
            stmt = (
                insert(Conversation)
                .values(
                    id=uuid.uuid4(),
                    participant_id=participant_id,
                    first_participant_id=low,
                    second_participant_id=high,
                    created_at=now,
                    updated_at=now,
                )
                .on_conflict_do_nothing(index_elements=["participant_id"])
            )
            self.db.execute(stmt)
        self.db.commit()

        conversation = self.get_conversation_by_participants(first, second)
        if conversation is None:
            raise RuntimeError(f"Conversation {participant_id} missing after upsert")
        return conversation

    def append_chat(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        recipient_id: Optional[UUID] = None,
        timestamp: Optional[datetime] = None,
    ) -> Chat:
        """
        Append a chat to a conversation and return it.

        Raises:
            ConversationNotFoundError: no such conversation, or the sender is
                not one of its participants.
            RecipientNotFoundError: recipient_id is given and is not the
                sender's peer in this conversation.
        """
        conversation = (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .with_for_update()
            .first()
        )
        if conversation is None or not conversation.has_participant(sender_id):
            self.db.rollback()
            raise ConversationNotFoundError(conversation_id=conversation_id)
        if recipient_id is not None and (
            recipient_id == sender_id or not conversation.has_participant(recipient_id)
        ):
            self.db.rollback()
            raise RecipientNotFoundError(conversation_id=conversation_id)

        now = datetime.now(timezone.utc)
        chat = Chat(
            conversation_id=conversation.id,
            sent_by_id=sender_id,
            content=content,
            timestamp=timestamp or now,
            viewed=False,
        )
        conversation.updated_at = now
        self.db.add(chat)
        self.db.commit()
        self.db.refresh(chat)
        return chat

    def get_chats(
        self,
        conversation_id: UUID,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Chat]:
        """Chats of a conversation in arrival order."""
        return self.get_chats_query(conversation_id).offset(skip).limit(limit).all()

    def get_chats_query(self, conversation_id: UUID) -> Query[Chat]:
        """Get a query for a conversation's chats (for pagination)."""
        return (
            self.db.query(Chat)
            .filter(Chat.conversation_id == conversation_id)
            .order_by(Chat.id.asc())
        )

    def get_chat_count(self, conversation_id: UUID) -> int:
        return self.db.query(Chat).filter(Chat.conversation_id == conversation_id).count()
