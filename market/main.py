"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from market.config import Settings, get_settings
from market.infra.logging_config import LoggingConfig
from market.realtime.authenticator import ConnectionAuthenticator
from market.realtime.gateway import MessageGateway
from market.realtime.registry import ChannelRegistry
from market.realtime.store import ConversationStore
from market.routers import conversation_router, realtime_router
from market.utils.rate_limit import build_chat_rate_limiter

logger = logging.getLogger(__name__)


def _build_redis_client(settings: Settings) -> Optional[redis.Redis]:
    if not settings.chat_rate_limit_per_user_per_minute:
        return None
    return redis.Redis(host=settings.redis_host, port=settings.redis_port)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await app.state.channel_registry.close()
    if app.state.redis_client is not None:
        app.state.redis_client.close()


def create_app(testing: bool = False) -> FastAPI:
    """
    Build the application.

    The channel registry and gateway live on ``app.state`` for the lifetime of
    the process; the lifespan handler closes the registry on shutdown.
    ``testing`` skips external connections (Redis).
    """
    settings = get_settings()
    LoggingConfig()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    redis_client = None if testing else _build_redis_client(settings)
    registry = ChannelRegistry(delivery_timeout=settings.delivery_timeout_seconds)
    app.state.redis_client = redis_client
    app.state.channel_registry = registry
    app.state.connection_authenticator = ConnectionAuthenticator()
    app.state.message_gateway = MessageGateway(
        registry,
        ConversationStore(),
        rate_limiter=build_chat_rate_limiter(
            redis_client, settings.chat_rate_limit_per_user_per_minute
        ),
    )

    app.include_router(conversation_router)
    app.include_router(realtime_router)

    logger.info("Application %s created (%s)", settings.app_name, settings.environment)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on PORT."""
    settings = get_settings()
    uvicorn.run(
        "market.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
