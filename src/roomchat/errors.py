"""Command failures.

Learn: Every refusal a command can hit is a CommandError subclass.
Entities and the router raise them; the router is the single place
that turns them into a `commandFailed` event for the requesting
connection. None of them are fatal to the connection or the process.
"""


class CommandError(Exception):
    """Base for refusals reported back to the requester."""


class CommandValidationError(CommandError):
    """Payload failed schema validation. Carries one message per rule."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


class UnknownCommandError(CommandError):
    """The frame named a command the router does not handle."""


class UserNotFoundError(CommandError):
    """No ConnectionUser registered for a live connection id.

    This is a registry inconsistency, not a user error.
    """


class ChannelNotFoundError(CommandError):
    """Raised when a command names a channel that isn't configured."""


class PasswordRequiredError(CommandError):
    """Private channel joined without a password."""


class InvalidPasswordError(CommandError):
    """Password didn't match the channel's hash."""


class NotJoinedError(CommandError):
    """Command requires membership in the channel."""
