"""
Errors raised by the real-time chat layer.

Authentication errors refuse a WebSocket handshake; each carries the close
code and reason string sent to the client. Gateway errors are scoped to a
single inbound event and are reported back to the sender as ``chat:error``.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID


class AuthenticationError(Exception):
    close_code: int = 4001
    reason: str = "unauthorized"

    def __init__(self, reason: Optional[str] = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class MissingCredentialError(AuthenticationError):
    close_code = 4001
    reason = "unauthorized, missing credential"


class InvalidCredentialError(AuthenticationError):
    close_code = 4002
    reason = "invalid credential"


class CredentialExpiredError(AuthenticationError):
    close_code = 4003
    reason = "credential expired"


class GatewayError(Exception):
    code: str = "gateway_error"
    detail: str = "Chat event could not be handled"

    def __init__(
        self,
        detail: Optional[str] = None,
        conversation_id: Optional[UUID] = None,
    ) -> None:
        if detail is not None:
            self.detail = detail
        self.conversation_id = conversation_id
        super().__init__(self.detail)

    def to_payload(self) -> dict:
        payload = {"code": self.code, "detail": self.detail}
        if self.conversation_id is not None:
            payload["conversationId"] = str(self.conversation_id)
        return payload


class InvalidEventError(GatewayError):
    code = "invalid_event"
    detail = "Invalid event payload"


class ConversationNotFoundError(GatewayError):
    code = "conversation_not_found"
    detail = "Conversation not found"


class RecipientNotFoundError(GatewayError):
    code = "recipient_not_found"
    detail = "Recipient is not part of this conversation"


class PersistenceError(GatewayError):
    code = "persistence_error"
    detail = "Message could not be saved"


class RateLimitedError(GatewayError):
    code = "rate_limited"
    detail = "Too many messages, slow down"
