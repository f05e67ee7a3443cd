"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with ROOMCHAT_ prefix.
The channel set is part of the config: it is read once at startup and
never changes while the server runs.

Learn: complex fields (like `channels`) are parsed from JSON, e.g.
ROOMCHAT_CHANNELS='[{"name": "lobby"}, {"name": "ops", "password_hash": "$2b$..."}]'
"""

import re
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

CHANNEL_NAME_PATTERN = r"^[a-z0-9_-]{1,30}$"


class ChannelConfig(BaseModel):
    """One statically configured channel. Empty hash means public."""

    name: str
    password_hash: str = ""


DEFAULT_CHANNELS = [
    ChannelConfig(name="room-1"),
    ChannelConfig(
        name="room-2",
        password_hash="$2b$12$9V4EaTPYyA3TR6XcuwMfneciGkNjseikfN54ANZN8eXIXTxxAvkey",
    ),
]


class Settings(BaseSettings):
    """All app configuration. Set via ROOMCHAT_* env vars."""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"

    # TLS (optional — plain ws:// when unset)
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None

    # WebSocket keepalive
    ws_ping_interval: float = Field(default=60.0, gt=0)
    ws_ping_timeout: float = Field(default=60.0, gt=0)

    # Rate limiting: tokens per connection, refilled over the interval
    rate_limit_tokens: int = Field(default=20, gt=0)
    rate_limit_interval: float = Field(default=30.0, gt=0)  # seconds

    # Per-channel random number broadcast
    random_interval: float = Field(default=5.0, gt=0)  # seconds

    channels: list[ChannelConfig] = Field(
        default_factory=lambda: [c.model_copy() for c in DEFAULT_CHANNELS]
    )

    model_config = {"env_prefix": "ROOMCHAT_"}

    @model_validator(mode="after")
    def validate_channels(self):
        """Channel names must be addressable by commands and unique."""
        seen: set[str] = set()
        for channel in self.channels:
            if not re.fullmatch(CHANNEL_NAME_PATTERN, channel.name):
                raise ValueError(
                    f"Invalid channel name {channel.name!r}: "
                    f"must match {CHANNEL_NAME_PATTERN}"
                )
            if channel.name in seen:
                raise ValueError(f"Duplicate channel name {channel.name!r}")
            seen.add(channel.name)
        return self

    @model_validator(mode="after")
    def validate_tls_settings(self):
        """Cert and key must be configured together."""
        if bool(self.ssl_certfile) != bool(self.ssl_keyfile):
            raise ValueError(
                "ROOMCHAT_SSL_CERTFILE and ROOMCHAT_SSL_KEYFILE must be set together"
            )
        return self


# Process-wide defaults — the app factory accepts an override for tests
settings = Settings()
