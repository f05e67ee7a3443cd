"""Rate limiting — in-process token bucket, one per connection.

Learn: The bucket starts full with `tokens_per_interval` tokens and
refills continuously at tokens_per_interval / interval tokens per
second, never above capacity. On top of the bucket, a fixed window
counter caps the total: at most `tokens_per_interval` tokens can be
taken within one `interval`, no matter how much the bucket refilled.
Every inbound frame costs one token. Running out is a hard cutoff: the
WebSocket handler reports the violation and closes the connection.
"""

import time
from typing import Callable


class RateLimiter:
    """Token bucket rate limiter with a per-window cap."""

    def __init__(
        self,
        tokens_per_interval: int,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if tokens_per_interval <= 0 or interval <= 0:
            raise ValueError("tokens_per_interval and interval must be positive")
        self.capacity = tokens_per_interval
        self.interval = interval
        self._clock = clock
        self._tokens = float(tokens_per_interval)
        self._last_refill = clock()
        self._window_start = self._last_refill
        self._window_used = 0

    @property
    def tokens_remaining(self) -> float:
        self._refill()
        return min(self._tokens, float(self.capacity - self._window_used))

    def try_remove_tokens(self, count: int = 1) -> bool:
        """Take `count` tokens if available. Returns False when limited."""
        if count > self.capacity:
            return False
        self._refill()
        if self._tokens < count:
            return False
        if self._window_used + count > self.capacity:
            return False
        self._tokens -= count
        self._window_used += count
        return True

    def _refill(self) -> None:
        now = self._clock()

        if now - self._window_start >= self.interval:
            self._window_start = now
            self._window_used = 0

        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        self._last_refill = now
        rate = self.capacity / self.interval
        self._tokens = min(float(self.capacity), self._tokens + elapsed * rate)
