"""Adapt a Starlette WebSocket to the engine's `Connection` protocol."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator

from fastapi import WebSocket


class FastAPIConnection:
    """One accepted WebSocket, seen by the engine as a duplex text channel."""

    def __init__(self, websocket: WebSocket, *, name: str | None = None) -> None:
        self._websocket = websocket
        self.name = name or f"peer-{uuid.uuid4().hex[:8]}"

    async def send_text(self, data: str) -> None:
        await self._websocket.send_text(data)

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield text and binary frames until the peer disconnects."""

        while True:
            message = await self._websocket.receive()
            if message["type"] == "websocket.disconnect":
                return

            text = message.get("text")
            if text is not None:
                yield text
                continue

            data = message.get("bytes")
            if data is not None:
                yield data
