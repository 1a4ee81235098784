"""
Conversation and Chat models.

One conversation per unordered pair of users, keyed by ``participant_id``.
Chats are append-only; their integer id is the arrival order.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from market.db import Base
from market.models.mixins import TimestampMixin

PARTICIPANT_SEPARATOR = "_"


def sort_participants(first: UUID, second: UUID) -> List[UUID]:
    """Participants in canonical order (by their string form)."""
    return sorted([first, second], key=str)


def build_participant_id(first: UUID, second: UUID) -> str:
    """Order-independent key for a pair of users."""
    return PARTICIPANT_SEPARATOR.join(str(p) for p in sort_participants(first, second))


class Conversation(Base, TimestampMixin):
    __tablename__ = "conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    participant_id = Column(String(128), unique=True, nullable=False)
    first_participant_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    second_participant_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    first_participant = relationship("User", foreign_keys=[first_participant_id])
    second_participant = relationship("User", foreign_keys=[second_participant_id])
    chats = relationship(
        "Chat",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Chat.id",
    )

    @property
    def participants(self) -> List[UUID]:
        return [self.first_participant_id, self.second_participant_id]

    def has_participant(self, user_id: UUID) -> bool:
        return user_id in self.participants

    def peer_of(self, user_id: UUID):
        """The other participant's User row, or None if user_id is not a participant."""
        if user_id == self.first_participant_id:
            return self.second_participant
        if user_id == self.second_participant_id:
            return self.first_participant
        return None


class Chat(Base):
    """A single message inside a conversation. Never edited or deleted."""

    __tablename__ = "chats"

    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    conversation_id = Column(
        Uuid,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sent_by_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content = Column(Text, nullable=False)
    timestamp = Column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    # Read receipts are not implemented; nothing sets this to True yet.
    viewed = Column(Boolean, nullable=False, default=False)

    conversation = relationship("Conversation", back_populates="chats")
    sent_by = relationship("User")
