"""Test fixtures — in-memory connections and a fresh chat per test.

Learn: The chat core only needs a Connection (id, send, close) from the
transport, so most tests skip WebSockets entirely and drive the
CommandRouter with RecordingConnection, which just remembers every
event it was sent.

Channels start their broadcast task in the constructor, so they must be
built inside the test's event loop — hence async fixtures that stop
them again afterwards. The broadcast interval is set far in the future
so random events don't show up in unrelated assertions.
"""

import asyncio
import uuid
from typing import Any, Optional

import pytest
import pytest_asyncio

from roomchat.auth.password import PasswordVerifier
from roomchat.config import ChannelConfig
from roomchat.services.chat_service import CommandRouter
from roomchat.services.registry import ChannelRegistry


class RecordingConnection:
    """Connection stand-in that records what it was sent."""

    def __init__(self, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def send(self, event: str, data: dict[str, Any]) -> None:
        self.sent.append((event, data))

    def close(self, code: int = 1000) -> None:
        self.closed = True

    def events(self, name: str) -> list[dict[str, Any]]:
        return [data for event, data in self.sent if event == name]

    def names(self) -> list[str]:
        return [event for event, _ in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class FakeVerifier(PasswordVerifier):
    """Deterministic verifier: a password's "hash" is 'fake$<password>'.

    If `gate` is set, verification suspends until the event fires, which
    lets tests run other commands while a join is mid-verification.
    """

    def __init__(self):
        self.gate: Optional[asyncio.Event] = None
        self.calls: list[tuple[str, str]] = []

    async def verify(self, password: str, password_hash: str) -> bool:
        self.calls.append((password, password_hash))
        if self.gate is not None:
            await self.gate.wait()
        return password_hash == f"fake${password}"


NO_BROADCAST = 3600.0


@pytest.fixture()
def verifier():
    return FakeVerifier()


@pytest_asyncio.fixture()
async def channels(verifier):
    """room-1 (public) and room-2 (password "secret")."""
    registry = ChannelRegistry.from_config(
        [
            ChannelConfig(name="room-1"),
            ChannelConfig(name="room-2", password_hash="fake$secret"),
        ],
        verifier=verifier,
        random_interval=NO_BROADCAST,
    )
    try:
        yield registry
    finally:
        await registry.aclose()


@pytest.fixture()
def chat(channels):
    return CommandRouter(channels)


@pytest.fixture()
def connect(chat):
    """Register a new RecordingConnection and return it."""

    def _connect() -> RecordingConnection:
        connection = RecordingConnection()
        chat.on_connect(connection)
        return connection

    return _connect


def assert_membership_consistent(chat: CommandRouter) -> None:
    """C in U.channels <=> U in C.users, for every user and channel."""
    for user in chat.connections:
        for channel in chat.channels:
            assert user.is_joined(channel) == channel.has_user(user), (user, channel)
    for channel in chat.channels:
        for user in channel.users:
            assert user.id in chat.connections, (user, channel)
