"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and
reports how many channels are configured and how many clients are
currently connected. Nothing here touches membership.
"""

from fastapi import APIRouter, Request

from roomchat import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health."""
    chat = request.app.state.chat
    broadcasting = sum(1 for channel in chat.channels if channel.is_broadcasting)

    status = "healthy" if broadcasting == len(chat.channels) else "degraded"

    return {
        "status": status,
        "version": __version__,
        "channels": len(chat.channels),
        "connections": len(chat.connections),
    }
