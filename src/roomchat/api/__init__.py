"""HTTP route aggregation.

All routers registered here get mounted in main.py. The chat itself
lives on the WebSocket router in roomchat.realtime.websocket.
"""

from fastapi import APIRouter

from roomchat.api.health import router as health_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
