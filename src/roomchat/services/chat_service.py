"""Chat service — command routing for join / leave / message / count.

Learn: Service layer separates chat logic from the WebSocket transport.
The transport hands over (connection id, command name, raw payload);
the router:

1. Validates the payload against the command's schema
2. Resolves the acting ConnectionUser and the target Channel
3. Runs the entity operation for the command
4. Turns any CommandError into a `commandFailed` event

dispatch() returns that failure event (or None on success) and the
transport sends it to the requesting connection only. Events meant for
users (joined, greeting, message, usersCount) are sent by the entities.
"""

from __future__ import annotations

from typing import Any, Optional, Union, assert_never

import structlog

from roomchat.errors import (
    ChannelNotFoundError,
    CommandError,
    CommandValidationError,
    InvalidPasswordError,
    NotJoinedError,
    PasswordRequiredError,
    UnknownCommandError,
    UserNotFoundError,
)
from roomchat.events.types import Command
from roomchat.models.channel import Channel
from roomchat.models.message import Message
from roomchat.models.user import ConnectionUser
from roomchat.realtime.connection import Connection
from roomchat.schemas.commands import (
    JoinCommand,
    MessageCommand,
    parse_command,
)
from roomchat.schemas.events import CommandFailed
from roomchat.services.registry import ChannelRegistry, ConnectionRegistry

logger = structlog.get_logger()


class CommandRouter:
    """Validates commands and applies them to users and channels."""

    def __init__(
        self,
        channels: ChannelRegistry,
        connections: Optional[ConnectionRegistry] = None,
    ):
        self.channels = channels
        self.connections = connections if connections is not None else ConnectionRegistry()

    # ─── Connection lifecycle ───────────────────────────

    def on_connect(self, connection: Connection) -> ConnectionUser:
        user = self.connections.register(connection)
        logger.info("chat.connected", connection_id=connection.id, username=user.username)
        return user

    def on_disconnect(self, connection_id: str) -> None:
        """Drop a connection: leave every channel, forget the user.

        Emits nothing — the connection is already gone.
        """
        user = self.connections.remove(connection_id)
        if user is None:
            logger.warning("chat.disconnect_unknown", connection_id=connection_id)
            return

        left = list(user.channels)
        user.leave_all_channels()
        logger.info(
            "chat.disconnected",
            connection_id=connection_id,
            username=user.username,
            channels=left,
        )

    # ─── Commands ───────────────────────────────────────

    async def join(self, connection_id: str, payload: Any) -> Optional[CommandFailed]:
        return await self.dispatch(connection_id, Command.JOIN, payload)

    async def leave(self, connection_id: str, payload: Any) -> Optional[CommandFailed]:
        return await self.dispatch(connection_id, Command.LEAVE, payload)

    async def message(self, connection_id: str, payload: Any) -> Optional[CommandFailed]:
        return await self.dispatch(connection_id, Command.MESSAGE, payload)

    async def count(self, connection_id: str, payload: Any) -> Optional[CommandFailed]:
        return await self.dispatch(connection_id, Command.COUNT, payload)

    async def dispatch(
        self,
        connection_id: str,
        command: Union[Command, str],
        payload: Any,
    ) -> Optional[CommandFailed]:
        """Run one command. Returns the failure event, or None on success."""
        name = command.value if isinstance(command, Command) else command
        log = logger.bind(connection_id=connection_id, command=name)
        # Only the channel is logged; join payloads carry passwords
        channel_name = payload.get("channel") if isinstance(payload, dict) else None
        log.debug("chat.command", channel=channel_name)

        try:
            cmd = self._resolve_command(command)
            body = parse_command(cmd, payload)
            user = self._get_user(connection_id)
            channel = self._get_channel(body.channel)

            match cmd:
                case Command.JOIN:
                    await self._join(user, channel, body)
                case Command.LEAVE:
                    self._leave(user, channel)
                case Command.MESSAGE:
                    self._send_message(user, channel, body)
                case Command.COUNT:
                    self._count(user, channel)
                case _:
                    assert_never(cmd)

        except CommandValidationError as e:
            log.info("chat.validation_failed", errors=e.errors)
            return CommandFailed(validation_errors=e.errors)
        except UserNotFoundError as e:
            # Live connection without a user — the registry is out of sync
            log.error("chat.user_missing", error=str(e))
            return CommandFailed(error=str(e))
        except CommandError as e:
            log.info("chat.command_refused", error=str(e))
            return CommandFailed(error=str(e))

        return None

    # ─── Lookups ────────────────────────────────────────

    @staticmethod
    def _resolve_command(command: Union[Command, str]) -> Command:
        try:
            return Command(command)
        except ValueError:
            raise UnknownCommandError(f"Unknown command {command!r}")

    def _get_user(self, connection_id: str) -> ConnectionUser:
        user = self.connections.get(connection_id)
        if user is None:
            raise UserNotFoundError(
                f"User does not exist for client with id {connection_id}"
            )
        return user

    def _get_channel(self, name: str) -> Channel:
        channel = self.channels.get(name)
        if channel is None:
            raise ChannelNotFoundError(f"Channel does not exist with name {name}")
        return channel

    # ─── Handlers ───────────────────────────────────────

    async def _join(self, user: ConnectionUser, channel: Channel, body: JoinCommand) -> None:
        if channel.is_private():
            if not body.password:
                raise PasswordRequiredError(
                    "You must provide a password to join a private channel"
                )

            is_valid = await channel.verify_password(body.password)
            if not is_valid:
                raise InvalidPasswordError("Invalid password")

            # The connection may have gone away while bcrypt was running
            if self.connections.get(user.id) is not user:
                logger.info(
                    "chat.join_abandoned",
                    connection_id=user.id,
                    channel=channel.name,
                )
                return

        user.join(channel)
        logger.info("chat.joined", username=user.username, channel=channel.name)

    def _leave(self, user: ConnectionUser, channel: Channel) -> None:
        if not user.is_joined(channel):
            raise NotJoinedError(f"You are not joined to the channel {channel.name}")

        user.leave(channel)
        logger.info("chat.left", username=user.username, channel=channel.name)

    def _send_message(self, user: ConnectionUser, channel: Channel, body: MessageCommand) -> None:
        message = Message(body.content, channel, user)
        if not message.can_be_delivered():
            raise NotJoinedError("You must be joined to the channel to post messages")

        message.send()
        logger.debug(
            "chat.message_sent",
            username=user.username,
            channel=channel.name,
            recipients=channel.users_count,
        )

    def _count(self, user: ConnectionUser, channel: Channel) -> None:
        if not user.is_joined(channel):
            raise NotJoinedError("You must be joined to the channel to execute commands")

        channel.send_users_count_to(user)
