"""Channel and ConnectionUser tests — broadcast task and membership.

Learn: The broadcast tests use a short interval and a seeded RNG so the
numbers are predictable. The task must keep ticking with no members
and must not be restarted by joins.
"""

import asyncio
import random

import pytest

from conftest import RecordingConnection
from roomchat.models.channel import Channel
from roomchat.models.message import Message
from roomchat.models.user import ConnectionUser, generate_username
from roomchat.services.registry import ChannelRegistry

FAST = 0.02


@pytest.mark.asyncio
async def test_broadcast_reaches_members_within_interval():
    channel = Channel("room-1", random_interval=FAST, rng=random.Random(42))
    try:
        conn = RecordingConnection()
        ConnectionUser(conn).join(channel)

        await asyncio.sleep(FAST * 3)

        numbers = conn.events("random")
        assert numbers
        assert all(n["channel"] == "room-1" for n in numbers)
        assert all(0 <= n["number"] < 1 for n in numbers)
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_broadcast_uses_channel_rng():
    expected = random.Random(7).random()
    channel = Channel("room-1", random_interval=FAST, rng=random.Random(7))
    try:
        conn = RecordingConnection()
        ConnectionUser(conn).join(channel)

        await asyncio.sleep(FAST * 1.5)

        assert conn.events("random")[0]["number"] == expected
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_broadcast_keeps_running_when_empty():
    channel = Channel("room-1", random_interval=FAST)
    try:
        task = channel._broadcast_task
        await asyncio.sleep(FAST * 3)
        assert channel.is_broadcasting

        user = ConnectionUser(RecordingConnection())
        user.join(channel)
        user.leave(channel)
        await asyncio.sleep(FAST * 2)

        assert channel._broadcast_task is task
        assert channel.is_broadcasting
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_left_members_stop_receiving():
    channel = Channel("room-1", random_interval=FAST)
    try:
        conn = RecordingConnection()
        user = ConnectionUser(conn)
        user.join(channel)
        user.leave(channel)
        conn.clear()

        await asyncio.sleep(FAST * 3)

        assert conn.sent == []
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_stop_cancels_broadcast():
    channel = Channel("room-1", random_interval=FAST)

    await channel.aclose()

    assert not channel.is_broadcasting
    channel.stop()  # idempotent


@pytest.mark.asyncio
async def test_broadcast_survives_failing_member():
    class BrokenConnection(RecordingConnection):
        def send(self, event, data):
            raise RuntimeError("boom")

    channel = Channel("room-1", random_interval=FAST)
    try:
        broken = ConnectionUser(BrokenConnection())
        channel.add_user(broken)

        await asyncio.sleep(FAST * 3)

        assert channel.is_broadcasting
    finally:
        await channel.aclose()


# ─── Identity ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_channel_identity_is_read_only():
    channel = Channel("room-2", "fake$secret", random_interval=3600)
    try:
        assert channel.is_private()
        with pytest.raises(AttributeError):
            channel.name = "other"
        with pytest.raises(AttributeError):
            channel.password_hash = ""
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_public_channel_has_empty_hash():
    channel = Channel("room-1", random_interval=3600)
    try:
        assert not channel.is_private()
        assert channel.password_hash == ""
    finally:
        await channel.aclose()


# ─── Users and messages ─────────────────────────────────


def test_generated_usernames():
    name = generate_username()
    assert name.startswith("user")
    assert len(name) == 14
    assert name[4:].isdigit()


@pytest.mark.asyncio
async def test_join_updates_both_sides():
    channel = Channel("room-1", random_interval=3600)
    try:
        user = ConnectionUser(RecordingConnection(), username="alice")
        user.join(channel)

        assert user.is_joined(channel)
        assert channel.has_user(user)
        assert list(user.channels) == ["room-1"]

        user.leave_all_channels()

        assert not user.is_joined(channel)
        assert not channel.has_user(user)
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_message_delivery_requires_membership():
    channel = Channel("room-1", random_interval=3600)
    try:
        conn = RecordingConnection()
        user = ConnectionUser(conn, username="alice")
        message = Message("hello", channel, user)

        assert not message.can_be_delivered()

        user.join(channel)
        conn.clear()
        assert message.can_be_delivered()
        message.send()

        assert conn.sent == [
            ("message", {"channel": "room-1", "username": "alice", "content": "hello"})
        ]
    finally:
        await channel.aclose()


@pytest.mark.asyncio
async def test_registry_aclose_stops_every_channel():
    registry = ChannelRegistry(
        [Channel("room-1", random_interval=FAST), Channel("room-2", random_interval=FAST)]
    )
    assert all(channel.is_broadcasting for channel in registry)

    await registry.aclose()

    assert not any(channel.is_broadcasting for channel in registry)
