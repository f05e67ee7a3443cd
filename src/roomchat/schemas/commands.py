"""Pydantic schemas for inbound command payloads.

Learn: One model per command. parse_command() validates a raw payload
and collapses every pydantic error into a flat list of
"<field>: <message>" strings, which is what clients get back in
`commandFailed.validationErrors`.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from roomchat.config import CHANNEL_NAME_PATTERN
from roomchat.errors import CommandValidationError
from roomchat.events.types import Command

MAX_CONTENT_LENGTH = 8000
MAX_PASSWORD_LENGTH = 128


class ChannelCommand(BaseModel):
    channel: str = Field(..., pattern=CHANNEL_NAME_PATTERN)


class JoinCommand(ChannelCommand):
    password: Optional[str] = Field(default=None, max_length=MAX_PASSWORD_LENGTH)


class LeaveCommand(ChannelCommand):
    pass


class MessageCommand(ChannelCommand):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value: Any) -> Any:
        # Length limits apply to the trimmed text
        if isinstance(value, str):
            return value.strip()
        return value


class CountCommand(ChannelCommand):
    pass


COMMAND_SCHEMAS: dict[Command, type[ChannelCommand]] = {
    Command.JOIN: JoinCommand,
    Command.LEAVE: LeaveCommand,
    Command.MESSAGE: MessageCommand,
    Command.COUNT: CountCommand,
}


def parse_command(command: Command, payload: Any) -> ChannelCommand:
    """Validate a raw payload for `command`.

    Raises CommandValidationError listing every violated rule.
    """
    schema = COMMAND_SCHEMAS[command]
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise CommandValidationError(_format_errors(e)) from e


def _format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "payload"
        messages.append(f"{field}: {error['msg']}")
    return messages
