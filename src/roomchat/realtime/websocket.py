"""WebSocket endpoint — chat commands in, chat events out.

Learn: Each client connects to /ws. For the life of the socket:
1. A ConnectionUser is registered with the CommandRouter
2. A writer task drains the connection's outbox to the socket
3. The reader loop takes one frame at a time: rate limit → dispatch
4. On disconnect (or rate-limit cutoff) the user leaves every channel

Frames are JSON objects both ways: {"event": "<name>", "data": {...}}.
Awaiting each dispatch before reading the next frame is what keeps a
connection's commands in arrival order.
"""

import asyncio
import json
from typing import Any, Optional, Union

import structlog
from fastapi import APIRouter, WebSocket

from roomchat.middleware.rate_limit import RateLimiter
from roomchat.realtime.connection import POLICY_VIOLATION, WebSocketConnection
from roomchat.schemas.events import CommandFailed
from roomchat.services.chat_service import CommandRouter

logger = structlog.get_logger()
router = APIRouter()

RATE_LIMITED = CommandFailed(error="Too many requests, disconnecting.")
MALFORMED_FRAME = CommandFailed(error="Malformed frame")


def parse_frame(raw: Union[str, bytes]) -> Optional[tuple[str, Any]]:
    """Split a frame into (event, data). None if it isn't one."""
    try:
        frame = json.loads(raw)
    except ValueError:
        # Invalid JSON or invalid UTF-8
        return None
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        return None
    return frame["event"], frame.get("data")


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    """WebSocket endpoint for chat clients."""
    chat: CommandRouter = websocket.app.state.chat
    settings = websocket.app.state.settings

    await websocket.accept()

    connection = WebSocketConnection(websocket)
    limiter = RateLimiter(settings.rate_limit_tokens, settings.rate_limit_interval)

    structlog.contextvars.bind_contextvars(connection_id=connection.id)
    logger.info("realtime.connected", remote=connection.remote_address)

    chat.on_connect(connection)
    writer_task = asyncio.create_task(connection.writer())

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            # If rate limit is exceeded, connection is dropped
            if not limiter.try_remove_tokens(1):
                logger.warning("realtime.rate_limited", remote=connection.remote_address)
                connection.send(RATE_LIMITED.event, RATE_LIMITED.payload())
                connection.close(code=POLICY_VIOLATION)
                break

            parsed = parse_frame(message.get("text") or message.get("bytes") or "")
            if parsed is None:
                connection.send(MALFORMED_FRAME.event, MALFORMED_FRAME.payload())
                continue

            event, data = parsed
            failure = await chat.dispatch(connection.id, event, data)
            if failure is not None:
                connection.send(failure.event, failure.payload())
    finally:
        chat.on_disconnect(connection.id)
        connection.close()
        await writer_task
        logger.info("realtime.disconnected")
        structlog.contextvars.unbind_contextvars("connection_id")
