from market.routers.conversation_router import router as conversation_router
from market.routers.realtime_router import router as realtime_router

__all__ = [
    "conversation_router",
    "realtime_router",
]
