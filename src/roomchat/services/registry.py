"""Channel and connection registries.

Learn: Both registries are plain objects owned by the CommandRouter
(and, through it, by the app's lifespan) — there is no module-level
state, so every test builds its own.
"""

from __future__ import annotations

import asyncio
import random
from typing import Iterable, Iterator, Optional

import structlog

from roomchat.auth.password import PasswordVerifier
from roomchat.config import ChannelConfig
from roomchat.models.channel import Channel
from roomchat.models.user import ConnectionUser
from roomchat.realtime.connection import Connection

logger = structlog.get_logger()


class ChannelRegistry:
    """Fixed mapping of channel name → Channel, built at startup."""

    def __init__(self, channels: Iterable[Channel] = ()):
        self._channels: dict[str, Channel] = {}
        for channel in channels:
            if channel.name in self._channels:
                raise ValueError(f"Duplicate channel name {channel.name!r}")
            self._channels[channel.name] = channel

    @classmethod
    def from_config(
        cls,
        configs: Iterable[ChannelConfig],
        *,
        verifier: Optional[PasswordVerifier] = None,
        random_interval: float = Channel.DEFAULT_RANDOM_INTERVAL,
        rng: Optional[random.Random] = None,
    ) -> "ChannelRegistry":
        """Create every configured channel (starts their broadcast tasks)."""
        return cls(
            Channel(
                cfg.name,
                cfg.password_hash,
                verifier=verifier,
                random_interval=random_interval,
                rng=rng,
            )
            for cfg in configs
        )

    def get(self, name: str) -> Optional[Channel]:
        return self._channels.get(name)

    def names(self) -> list[str]:
        return list(self._channels)

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels.values())

    def __len__(self) -> int:
        return len(self._channels)

    async def aclose(self) -> None:
        """Stop every channel's broadcast task together."""
        await asyncio.gather(*(channel.aclose() for channel in self._channels.values()))
        logger.info("channels.stopped", count=len(self._channels))


class ConnectionRegistry:
    """Live connections: connection id → ConnectionUser."""

    def __init__(self):
        self._users: dict[str, ConnectionUser] = {}

    def register(self, connection: Connection) -> ConnectionUser:
        user = ConnectionUser(connection)
        self._users[connection.id] = user
        return user

    def get(self, connection_id: str) -> Optional[ConnectionUser]:
        return self._users.get(connection_id)

    def remove(self, connection_id: str) -> Optional[ConnectionUser]:
        return self._users.pop(connection_id, None)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._users

    def __iter__(self) -> Iterator[ConnectionUser]:
        return iter(list(self._users.values()))

    def __len__(self) -> int:
        return len(self._users)
