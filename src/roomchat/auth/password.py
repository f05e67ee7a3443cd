"""Password hashing and verification for private channels.

Learn: bcrypt is deliberately slow (~250ms per check at 12 rounds).
The verifier runs checkpw in a worker thread so the event loop keeps
serving other connections while a join is being verified — that await
is the only suspension point in command handling.
"""

import asyncio
from abc import ABC, abstractmethod

import bcrypt

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a channel password with bcrypt ("$2b$..." format)."""
    pw_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


class PasswordVerifier(ABC):
    """Checks a candidate password against a stored hash."""

    @abstractmethod
    async def verify(self, password: str, password_hash: str) -> bool:
        ...


class BcryptVerifier(PasswordVerifier):
    """Constant-time bcrypt comparison, off the event loop."""

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._check, password, password_hash)

    @staticmethod
    def _check(password: str, password_hash: str) -> bool:
        try:
            pw_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
            return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            # Malformed stored hash
            return False
