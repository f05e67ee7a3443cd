"""Connections — the transport side of a ConnectionUser.

Learn: Connection is the small interface the chat core needs from a
transport: an opaque id, a non-blocking send, and close. The WebSocket
implementation queues outgoing frames and a writer task drains them in
order; tests use an in-memory connection that just records events.
"""

import asyncio
import uuid
from typing import Any, Optional, Protocol

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

logger = structlog.get_logger()

# WebSocket close code for policy violations (rate limit)
POLICY_VIOLATION = 1008


class Connection(Protocol):
    id: str

    def send(self, event: str, data: dict[str, Any]) -> None:
        ...

    def close(self, code: int = 1000) -> None:
        ...


_CLOSE = object()


class WebSocketConnection:
    """A WebSocket client with an ordered, non-blocking outbox."""

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self.websocket = websocket
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._closing = False
        self._close_code = 1000

    @property
    def remote_address(self) -> str:
        client = self.websocket.client
        return f"{client.host}:{client.port}" if client else "unknown"

    def send(self, event: str, data: dict[str, Any]) -> None:
        if self._closing:
            return
        self._outbox.put_nowait({"event": event, "data": data})

    def close(self, code: int = 1000) -> None:
        """Close after everything already queued has been sent."""
        if self._closing:
            return
        self._closing = True
        self._close_code = code
        self._outbox.put_nowait(_CLOSE)

    async def writer(self) -> None:
        """Drain the outbox to the socket until close() is called."""
        while True:
            frame = await self._outbox.get()
            if frame is _CLOSE:
                break
            try:
                await self.websocket.send_json(frame)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                # Peer is gone; drop the rest of the outbox
                logger.debug("realtime.send_failed", connection_id=self.id, error=str(e))
                self._closing = True
                return

        if (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        ):
            try:
                await self.websocket.close(code=self._close_code)
            except (RuntimeError, OSError) as e:
                logger.debug("realtime.close_failed", connection_id=self.id, error=str(e))
