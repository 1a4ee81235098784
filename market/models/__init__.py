from market.models.conversation import Chat, Conversation
from market.models.user import User

__all__ = [
    "Chat",
    "Conversation",
    "User",
]
