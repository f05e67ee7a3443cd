"""Chat message — a transient value, never stored."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roomchat.models.channel import Channel
    from roomchat.models.user import ConnectionUser


@dataclass(frozen=True)
class Message:
    content: str
    channel: Channel
    user: ConnectionUser

    def can_be_delivered(self) -> bool:
        """Only members may post to a channel."""
        return self.user.is_joined(self.channel)

    def send(self) -> None:
        """Deliver to every current member of the channel, sender included."""
        self.user.send_message_to_channel(self.content, self.channel)
