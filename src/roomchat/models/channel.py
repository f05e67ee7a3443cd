"""Chat channel — membership, password gate, random number broadcast.

Learn: A channel is created once at startup and lives for the whole
process. Its broadcast task starts in the constructor and keeps ticking
whether or not anyone is joined; stop()/aclose() exist for shutdown.

Constructing a Channel needs a running event loop (the lifespan, or an
async test).
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, Optional

import structlog

from roomchat.auth.password import BcryptVerifier, PasswordVerifier
from roomchat.schemas.events import Greeting, Joined, RandomNumber, UsersCount

if TYPE_CHECKING:
    from roomchat.models.user import ConnectionUser

logger = structlog.get_logger()


class Channel:
    """A fixed, named chat room."""

    DEFAULT_RANDOM_INTERVAL = 5.0  # seconds

    def __init__(
        self,
        name: str,
        password_hash: str = "",
        *,
        verifier: Optional[PasswordVerifier] = None,
        random_interval: float = DEFAULT_RANDOM_INTERVAL,
        rng: Optional[random.Random] = None,
    ):
        self._name = name
        self._password_hash = password_hash
        self._verifier = verifier or BcryptVerifier()
        self._users: set[ConnectionUser] = set()
        self.random_interval = random_interval
        self._rng = rng or random.Random()

        self._broadcast_task: asyncio.Task = asyncio.get_running_loop().create_task(
            self._broadcast_random(), name=f"channel:{name}:random"
        )

    def __repr__(self) -> str:
        return f"<Channel {self._name} users={len(self._users)}>"

    # ─── Identity ───────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def password_hash(self) -> str:
        return self._password_hash

    def is_private(self) -> bool:
        return self._password_hash != ""

    async def verify_password(self, candidate: str) -> bool:
        return await self._verifier.verify(candidate, self._password_hash)

    # ─── Membership ─────────────────────────────────────

    @property
    def users(self) -> frozenset[ConnectionUser]:
        return frozenset(self._users)

    @property
    def users_count(self) -> int:
        return len(self._users)

    def has_user(self, user: ConnectionUser) -> bool:
        return user in self._users

    def add_user(self, user: ConnectionUser) -> None:
        self._users.add(user)

    def remove_user(self, user: ConnectionUser) -> None:
        self._users.discard(user)

    # ─── Events ─────────────────────────────────────────

    def on_user_joined(self, user: ConnectionUser) -> None:
        """Confirm a join to the new member (and greet them if public).

        Existing members are not notified.
        """
        user.send_event(Joined(channel=self._name))
        if not self.is_private():
            self.greet(user)

    def greet(self, user: ConnectionUser) -> None:
        user.send_event(Greeting(channel=self._name, content=f"Hello {user.username}"))

    def send_users_count_to(self, user: ConnectionUser) -> None:
        user.send_event(UsersCount(channel=self._name, count=self.users_count))

    def send_random(self, number: float) -> None:
        event = RandomNumber(channel=self._name, number=number)
        for user in list(self._users):
            user.send_event(event)

    # ─── Broadcast task ─────────────────────────────────

    async def _broadcast_random(self) -> None:
        while True:
            await asyncio.sleep(self.random_interval)
            try:
                self.send_random(self._rng.random())
            except Exception:
                logger.exception("channel.broadcast_error", channel=self._name)

    @property
    def is_broadcasting(self) -> bool:
        return not self._broadcast_task.done()

    def stop(self) -> None:
        """Cancel the broadcast task. Idempotent."""
        self._broadcast_task.cancel()

    async def aclose(self) -> None:
        """Cancel the broadcast task and wait for it to finish."""
        self.stop()
        try:
            await self._broadcast_task
        except asyncio.CancelledError:
            pass
