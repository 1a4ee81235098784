"""Fixtures for conversations and chat event payloads."""

import pytest

from market.services.conversation_service import ConversationService


@pytest.fixture(scope="function")
def setup_conversation(db, setup_user, setup_peer):
    """Conversation between setup_user and setup_peer."""
    return ConversationService(db).find_or_create_conversation(
        setup_user.id, setup_peer.id
    )


@pytest.fixture(scope="function")
def chat_payload(setup_conversation, setup_user, setup_peer):
    """Factory for ``chat:new`` data sent by setup_user to setup_peer."""

    def _factory(text: str = "hello", message_id: str = "m-1") -> dict:
        return {
            "conversationId": str(setup_conversation.id),
            "to": str(setup_peer.id),
            "message": {
                "id": message_id,
                "time": "2026-10-19T12:00:00.000Z",
                "text": text,
                "user": {"id": str(setup_user.id), "name": setup_user.name},
            },
        }

    return _factory
