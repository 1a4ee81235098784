"""
Message gateway: persist inbound chat events, then fan them out.

A chat is written to the conversation store before any delivery is attempted,
so a recipient never sees a message that was not recorded. Delivery is best
effort; recipients that are offline catch up from the stored history.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from market.core.errors import GatewayError, InvalidEventError, RateLimitedError
from market.realtime.registry import ChannelRegistry
from market.realtime.store import ConversationStore
from market.schemas.chat_event import (
    CHAT_ERROR,
    CHAT_MESSAGE,
    CHAT_NEW,
    PING,
    PONG,
    IncomingChatEvent,
    OutgoingChatEvent,
    WsInbound,
    WsOutbound,
)

logger = logging.getLogger(__name__)

RateLimiter = Callable[[UUID], bool]


class MessageGateway:
    def __init__(
        self,
        registry: ChannelRegistry,
        store: ConversationStore,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._rate_limiter = rate_limiter

    async def handle_chat_event(
        self, sender_id: UUID, event: IncomingChatEvent
    ) -> OutgoingChatEvent:
        """
        Store event's message in its conversation and push it to the recipient.

        Args:
            sender_id: Identity authenticated at handshake; recorded as the author.
            event: Validated ``chat:new`` payload.

        Returns:
            OutgoingChatEvent: What was (or would have been) delivered.

        Raises:
            RateLimitedError: Sender is over its per-minute limit.
            ConversationNotFoundError: Unknown conversation or sender not in it.
            RecipientNotFoundError: ``to`` is not the sender's peer.
            PersistenceError: The store failed; nothing was delivered.
        """
        if self._rate_limiter is not None:
            allowed = await run_in_threadpool(self._rate_limiter, sender_id)
            if not allowed:
                raise RateLimitedError(conversation_id=event.conversation_id)

        chat_id = await self._store.append_chat(
            event.conversation_id,
            sender_id,
            event.message.text,
            recipient_id=event.to,
        )

        outbound = OutgoingChatEvent(
            from_=sender_id,
            conversation_id=event.conversation_id,
            message=event.message,
        )
        frame = WsOutbound(event=CHAT_MESSAGE, data=outbound.to_wire())
        delivered = await self._registry.deliver(event.to, frame.model_dump())
        logger.debug(
            "Chat %s in conversation %s delivered to %d channel(s) of %s",
            chat_id,
            event.conversation_id,
            delivered,
            event.to,
        )
        return outbound

    async def dispatch(self, sender_id: UUID, raw: str) -> Optional[WsOutbound]:
        """
        Handle one text frame from sender_id's connection.

        Returns the frame to send back to the sender (pong or chat:error), or
        None. Errors never escape: they are scoped to this single frame.
        """
        try:
            return await self._dispatch(sender_id, raw)
        except GatewayError as e:
            logger.info("Rejected event from %s: %s", sender_id, e.detail)
            return WsOutbound(event=CHAT_ERROR, data=e.to_payload())
        except Exception:
            logger.exception("Unexpected error handling event from %s", sender_id)
            return WsOutbound(
                event=CHAT_ERROR,
                data={"code": "internal_error", "detail": "Internal server error"},
            )

    async def _dispatch(self, sender_id: UUID, raw: str) -> Optional[WsOutbound]:
        try:
            frame = WsInbound.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise InvalidEventError("Frame must be a JSON object with an event name") from e

        if frame.event == PING:
            return WsOutbound(event=PONG, data=frame.data)
        if frame.event == CHAT_NEW:
            try:
                event = IncomingChatEvent.model_validate(frame.data)
            except ValidationError as e:
                raise InvalidEventError(f"Invalid {CHAT_NEW} payload") from e
            await self.handle_chat_event(sender_id, event)
            return None
        raise InvalidEventError(f"Unknown event: {frame.event}")
