"""Async facade over ConversationService for use on the event loop."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, ContextManager, Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market.core.errors import PersistenceError
from market.db import db_manager
from market.infra.logging_config import get_logger
from market.services.conversation_service import ConversationService

logger = get_logger("conversation_store")

SessionScope = Callable[[], ContextManager[Session]]


class ConversationStore:
    """
    Runs blocking ORM work in the threadpool so only the calling task waits.

    Store failures surface as PersistenceError; not-found errors from the
    service propagate unchanged.
    """

    def __init__(self, session_scope: Optional[SessionScope] = None) -> None:
        self._session_scope = session_scope or db_manager.db_session

    async def find_or_create_conversation(self, first: UUID, second: UUID) -> UUID:
        return await run_in_threadpool(self._find_or_create, first, second)

    async def append_chat(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        recipient_id: Optional[UUID] = None,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """Persist a chat; returns the new chat id."""
        return await run_in_threadpool(
            self._append, conversation_id, sender_id, content, recipient_id, timestamp
        )

    def _find_or_create(self, first: UUID, second: UUID) -> UUID:
        try:
            with self._session_scope() as db:
                return ConversationService(db).find_or_create_conversation(
                    first, second
                ).id
        except SQLAlchemyError as e:
            logger.error("Could not open conversation %s_%s: %s", first, second, e)
            raise PersistenceError() from e

    def _append(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        recipient_id: Optional[UUID],
        timestamp: Optional[datetime],
    ) -> int:
        try:
            with self._session_scope() as db:
                chat = ConversationService(db).append_chat(
                    conversation_id,
                    sender_id,
                    content,
                    recipient_id=recipient_id,
                    timestamp=timestamp,
                )
                return chat.id
        except SQLAlchemyError as e:
            logger.error(
                "Could not store chat in conversation %s: %s", conversation_id, e
            )
            raise PersistenceError(conversation_id=conversation_id) from e
