"""Pydantic schemas for conversation HTTP responses."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Public profile of a chat participant."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    avatar: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("avatar", "avatar_url")
    )


class ChatRead(BaseModel):
    """One chat entry, shaped like the client-side message objects."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str = Field(validation_alias=AliasChoices("text", "content"))
    time: datetime = Field(validation_alias=AliasChoices("time", "timestamp"))
    viewed: bool = False
    user: UserProfile = Field(validation_alias=AliasChoices("user", "sent_by"))


class ConversationIdResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: UUID = Field(alias="conversationId")


class ConversationDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    chats: list[ChatRead]
    peer_profile: Optional[UserProfile] = Field(default=None, alias="peerProfile")
