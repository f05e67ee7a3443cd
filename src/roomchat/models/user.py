"""Connection user — the chat identity bound to one live connection.

Learn: ConnectionUser and Channel each hold one side of the membership
relation. join/leave/leave_all_channels update both sides in one
synchronous step (no await in between), so on a single event loop no
observer can ever see half a membership.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Optional

from roomchat.schemas.events import ChatMessage, OutboundEvent

if TYPE_CHECKING:
    from roomchat.models.channel import Channel
    from roomchat.realtime.connection import Connection


def generate_username() -> str:
    """Random display name like 'user0123456789'."""
    return f"user{random.randrange(10**10):010d}"


class ConnectionUser:
    """One live connection and the channels it has joined."""

    def __init__(self, connection: Connection, username: Optional[str] = None):
        self.connection = connection
        self.username = username or generate_username()
        self._channels: dict[str, Channel] = {}

    def __repr__(self) -> str:
        return f"<ConnectionUser {self.username} id={self.id}>"

    @property
    def id(self) -> str:
        return self.connection.id

    @property
    def channels(self) -> dict[str, Channel]:
        return dict(self._channels)

    # ─── Membership ─────────────────────────────────────

    def join(self, channel: Channel) -> None:
        """Join a channel. Joining again re-confirms instead of failing."""
        channel.add_user(self)
        self._channels[channel.name] = channel

        channel.on_user_joined(self)

    def leave(self, channel: Channel) -> None:
        channel.remove_user(self)
        self._channels.pop(channel.name, None)

    def leave_all_channels(self) -> None:
        for channel in self._channels.values():
            channel.remove_user(self)
        self._channels.clear()

    def is_joined(self, channel: Channel) -> bool:
        return channel.name in self._channels

    # ─── Sending ────────────────────────────────────────

    def send_message_to_channel(self, content: str, channel: Channel) -> None:
        event = ChatMessage(channel=channel.name, username=self.username, content=content)
        for member in channel.users:
            member.send_event(event)

    def send_event(self, event: OutboundEvent) -> None:
        """Send an event to this user only."""
        self.connection.send(event.event, event.payload())
