"""In-memory channel used by registry and gateway tests."""

import asyncio
import uuid


class FakeChannel:
    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.id = uuid.uuid4().hex
        self.sent: list[dict] = []
        self._fail = fail
        self._delay = delay

    async def send(self, payload: dict) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise RuntimeError("connection already closed")
        self.sent.append(payload)
