"""
Optional per-user rate limiting for chat events.

Uses Redis when CHAT_RATE_LIMIT_PER_USER_PER_MINUTE is set.
If not set or Redis unavailable, no limit is applied.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


def check_chat_rate_limit(
    user_id: UUID,
    redis_client: Optional[object],
    limit_per_minute: Optional[int],
) -> bool:
    """
    Check if user_id is within its per-minute chat limit.
    Returns True if allowed, False if rate limited.
    If redis_client or limit_per_minute is None, always returns True.
    """
    if redis_client is None or limit_per_minute is None or limit_per_minute <= 0:
        return True
    key = f"market:chat:ratelimit:{user_id}"
    try:
        pipe = redis_client.pipeline()
        # The window starts with the first message; later ones must not extend it
        pipe.set(key, 0, ex=WINDOW_SECONDS, nx=True)
        pipe.incr(key)
        results = pipe.execute()
        count = results[1] if results else 0
        return count <= limit_per_minute
    except Exception as e:
        logger.warning("Rate limit check failed, allowing message: %s", e)
        return True


def build_chat_rate_limiter(
    redis_client: Optional[object], limit_per_minute: Optional[int]
) -> Optional[Callable[[UUID], bool]]:
    """Bind a client and limit into a checker, or None when limiting is off."""
    if redis_client is None or not limit_per_minute or limit_per_minute <= 0:
        return None

    def _check(user_id: UUID) -> bool:
        return check_chat_rate_limit(user_id, redis_client, limit_per_minute)

    return _check
