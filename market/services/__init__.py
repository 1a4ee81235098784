from market.services.conversation_service import ConversationService
from market.services.user_service import UserService

__all__ = [
    "ConversationService",
    "UserService",
]
