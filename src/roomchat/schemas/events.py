"""Pydantic schemas for outbound events.

Learn: Each model knows its own event name (the `event` ClassVar), so
senders pass a typed object instead of a name plus a loose dict.
Field aliases keep the wire format camelCase.
"""

from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from roomchat.events import types


class OutboundEvent(BaseModel):
    event: ClassVar[str]

    model_config = ConfigDict(populate_by_name=True)

    def payload(self) -> dict:
        """Wire representation (camelCase keys, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Joined(OutboundEvent):
    event: ClassVar[str] = types.JOINED

    channel: str


class Greeting(OutboundEvent):
    event: ClassVar[str] = types.GREETING

    channel: str
    content: str


class ChatMessage(OutboundEvent):
    event: ClassVar[str] = types.MESSAGE

    channel: str
    username: str
    content: str


class UsersCount(OutboundEvent):
    event: ClassVar[str] = types.USERS_COUNT

    channel: str
    count: int


class RandomNumber(OutboundEvent):
    event: ClassVar[str] = types.RANDOM

    channel: str
    number: float


class CommandFailed(OutboundEvent):
    """Uniform failure: either a single error or a list of validation errors."""

    event: ClassVar[str] = types.COMMAND_FAILED

    error: Optional[str] = None
    validation_errors: Optional[list[str]] = Field(
        default=None, alias="validationErrors"
    )
