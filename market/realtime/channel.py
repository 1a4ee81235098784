from __future__ import annotations

import uuid
from typing import Any, Protocol

from fastapi import WebSocket


class Channel(Protocol):
    """One live connection that events can be pushed to."""

    id: str

    async def send(self, payload: dict[str, Any]) -> None: ...


class WebSocketChannel:
    """Channel backed by an accepted FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self.id = uuid.uuid4().hex
        self._websocket = websocket

    async def send(self, payload: dict[str, Any]) -> None:
        await self._websocket.send_json(payload)

    def __repr__(self) -> str:
        return f"WebSocketChannel(id={self.id!r})"
