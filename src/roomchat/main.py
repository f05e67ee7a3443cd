"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The lifespan owns the chat state: channels are created at
startup (which starts their random-number broadcasts) and all of them
are stopped together at shutdown. The router lives on app.state, so
there are no module-level registries.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from roomchat import __version__
from roomchat.auth.password import BcryptVerifier, PasswordVerifier
from roomchat.config import Settings, settings as default_settings
from roomchat.services.chat_service import CommandRouter
from roomchat.services.registry import ChannelRegistry

logger = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    verifier: Optional[PasswordVerifier] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings
    verifier = verifier or BcryptVerifier()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle.

        Anything before `yield` runs at startup, after `yield` at shutdown.
        """
        channels = ChannelRegistry.from_config(
            settings.channels,
            verifier=verifier,
            random_interval=settings.random_interval,
        )
        app.state.chat = CommandRouter(channels)

        logger.info(
            "roomchat.starting",
            version=__version__,
            environment=settings.environment,
            port=settings.port,
            channels=channels.names(),
        )

        yield

        logger.info("roomchat.shutdown")
        await channels.aclose()

    app = FastAPI(
        title="roomchat",
        description="Room-based real-time chat over WebSockets",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    from roomchat.api import api_router
    from roomchat.realtime.websocket import router as ws_router

    app.include_router(api_router)
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: roomchat.main:app)
app = create_app()
