"""Event type constants and the closed set of inbound commands.

Learn: Centralizing event names as constants prevents typos and makes
it easy to discover everything a client can receive. Inbound commands
are an Enum so the router can match on them exhaustively — adding a
command means adding a member here and a `case` in the router.
"""

from enum import Enum


class Command(str, Enum):
    """Commands a client may send."""

    JOIN = "join"
    LEAVE = "leave"
    MESSAGE = "message"
    COUNT = "count"


# ─── Outbound events ─────────────────────────────────────

JOINED = "joined"
GREETING = "greeting"
MESSAGE = "message"
USERS_COUNT = "usersCount"
RANDOM = "random"
COMMAND_FAILED = "commandFailed"
