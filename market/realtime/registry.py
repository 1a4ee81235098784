"""
Channel registry: which live connections belong to which user.

A user may hold several connections at once (tabs, devices). Mutations of
one user's channel set are serialized by a per-user lock; different users
never contend with each other. Deliveries read the set under that lock and
send outside it.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, FrozenSet, Optional, Set
from uuid import UUID

from market.realtime.channel import Channel

logger = logging.getLogger(__name__)


class ChannelRegistry:
    def __init__(self, delivery_timeout: Optional[float] = 5.0) -> None:
        self._delivery_timeout = delivery_timeout
        self._channels: Dict[UUID, Set[Channel]] = {}
        self._owners: Dict[str, UUID] = {}
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._lock_users: Dict[UUID, int] = {}
        self._closed = False

    @asynccontextmanager
    async def _identity_lock(self, identity: UUID) -> AsyncIterator[None]:
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        self._lock_users[identity] = self._lock_users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[identity] - 1
            if remaining:
                self._lock_users[identity] = remaining
            else:
                # Nobody holds or waits on it any more
                del self._lock_users[identity]
                del self._locks[identity]

    async def register(self, identity: UUID, channel: Channel) -> None:
        """Add channel to identity's set. Registering the same channel again is a no-op."""
        if self._closed:
            raise RuntimeError("Channel registry is closed")
        owner = self._owners.get(channel.id)
        if owner is not None and owner != identity:
            raise ValueError(f"Channel {channel.id} is already registered to another user")
        async with self._identity_lock(identity):
            self._channels.setdefault(identity, set()).add(channel)
            self._owners[channel.id] = identity
        logger.debug("Registered channel %s for user %s", channel.id, identity)

    async def unregister(self, channel: Channel) -> None:
        """Remove channel from whichever identity owns it. Unknown channels are ignored."""
        identity = self._owners.get(channel.id)
        if identity is None:
            return
        async with self._identity_lock(identity):
            self._owners.pop(channel.id, None)
            channels = self._channels.get(identity)
            if channels is not None:
                channels.discard(channel)
                if not channels:
                    del self._channels[identity]
        logger.debug("Unregistered channel %s for user %s", channel.id, identity)

    async def deliver(self, identity: UUID, payload: dict[str, Any]) -> int:
        """
        Push payload to every channel of identity; return how many sends succeeded.

        The channel set is read under the identity lock and the sends run
        concurrently outside it, so a stalled channel costs at most one
        delivery timeout and never blocks registration. An identity with no
        channels is not an error. A failing or slow channel is logged and
        skipped; its own connection teardown unregisters it.
        """
        if identity not in self._channels:
            return 0
        async with self._identity_lock(identity):
            channels = list(self._channels.get(identity, ()))
        if not channels:
            return 0
        results = await asyncio.gather(
            *(self._send(identity, channel, payload) for channel in channels)
        )
        return sum(results)

    async def _send(self, identity: UUID, channel: Channel, payload: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(channel.send(payload), timeout=self._delivery_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Delivery to channel %s of user %s timed out", channel.id, identity
            )
            return False
        except Exception as e:
            logger.warning(
                "Delivery to channel %s of user %s failed: %s", channel.id, identity, e
            )
            return False
        return True

    def channels_for(self, identity: UUID) -> FrozenSet[Channel]:
        return frozenset(self._channels.get(identity, ()))

    def is_online(self, identity: UUID) -> bool:
        return bool(self._channels.get(identity))

    @property
    def connection_count(self) -> int:
        return len(self._owners)

    async def close(self) -> None:
        """Drop every registration. Called once at application shutdown."""
        self._closed = True
        self._channels.clear()
        self._owners.clear()
        logger.info("Channel registry closed")
