"""WebSocket frames and chat event payloads exchanged on /socket-message."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CHAT_NEW = "chat:new"
CHAT_MESSAGE = "chat:message"
CHAT_ERROR = "chat:error"
PING = "ping"
PONG = "pong"


class WsInbound(BaseModel):
    """Client -> server frame."""

    event: str  # chat:new | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server -> client frame."""

    event: str  # chat:message | chat:error | pong
    data: dict[str, Any] = {}


class MessageProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    avatar: Optional[str] = None


class ChatMessage(BaseModel):
    """Message body as composed by the client. Relayed to the peer untouched."""

    model_config = ConfigDict(extra="allow")

    id: str
    time: str
    text: str = Field(min_length=1)
    user: MessageProfile


class IncomingChatEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: UUID = Field(alias="conversationId")
    to: UUID
    message: ChatMessage


class OutgoingChatEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: UUID = Field(alias="from")
    conversation_id: UUID = Field(alias="conversationId")
    message: ChatMessage

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
