"""
Attempt Limiter

Fixed-window failure counter for authentication-sensitive operations
(login attempts, password changes). Once a key accumulates the maximum
number of failures inside its window it is locked out until the window
elapses.

State is process-local; a multi-instance deployment would need to move
it to a shared store.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional
from loguru import logger

from cryptodash.utils.exceptions import RateLimitExceededError


@dataclass
class WindowCounter:
    """Failure counter for a single fixed window."""
    limit: int
    window_seconds: float
    window_start: float
    count: int = 0

    def expired(self, now: float) -> bool:
        """Check whether the window has elapsed."""
        return now - self.window_start >= self.window_seconds

    def time_until_reset(self, now: float) -> float:
        """Seconds until the window elapses."""
        return max(0.0, self.window_start + self.window_seconds - now)

    def remaining(self) -> int:
        """Attempts left in the current window."""
        return max(0, self.limit - self.count)


@dataclass
class RateLimitStatus:
    """Outcome of a limiter check."""
    allowed: bool
    remaining: int
    retry_after: float = 0.0


class AttemptLimiter:
    """
    Fixed-window attempt limiter keyed by user id or client IP.

    The clock is injectable so tests can move time without sleeping.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        clock: Optional[Callable[[], float]] = None,
        name: str = "attempts",
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock or time.monotonic
        self._counters: dict[str, WindowCounter] = {}

    def _current(self, key: str, now: float) -> Optional[WindowCounter]:
        counter = self._counters.get(key)
        if counter is not None and counter.expired(now):
            del self._counters[key]
            return None
        return counter

    def check(self, key: str) -> RateLimitStatus:
        """Check whether another attempt is allowed without counting one."""
        now = self._clock()
        counter = self._current(key, now)
        if counter is None:
            return RateLimitStatus(allowed=True, remaining=self.max_attempts)

        if counter.count >= self.max_attempts:
            return RateLimitStatus(
                allowed=False,
                remaining=0,
                retry_after=counter.time_until_reset(now),
            )
        return RateLimitStatus(allowed=True, remaining=counter.remaining())

    def ensure_allowed(self, key: str) -> RateLimitStatus:
        """
        Check a key and raise when it is locked out.

        Raises:
            RateLimitExceededError: If the key has exhausted its window
        """
        result = self.check(key)
        if not result.allowed:
            logger.warning(f"{self.name}: key {key} locked out for {result.retry_after:.0f}s")
            raise RateLimitExceededError(retry_after=result.retry_after)
        return result

    def record_failure(self, key: str) -> RateLimitStatus:
        """
        Count a failed attempt against a key.

        Opening a new window also drops every expired one, so the map only
        holds keys that failed within the last window.
        """
        now = self._clock()
        counter = self._current(key, now)
        if counter is None:
            self._prune(now)
            counter = WindowCounter(
                limit=self.max_attempts,
                window_seconds=self.window_seconds,
                window_start=now,
            )
            self._counters[key] = counter

        counter.count += 1
        return RateLimitStatus(
            allowed=counter.count < self.max_attempts,
            remaining=counter.remaining(),
            retry_after=counter.time_until_reset(now) if counter.count >= self.max_attempts else 0.0,
        )

    def reset(self, key: str) -> None:
        """Forget all failures for a key (e.g. after a successful attempt)."""
        self._counters.pop(key, None)

    def _prune(self, now: float) -> int:
        expired = [k for k, c in self._counters.items() if c.expired(now)]
        for key in expired:
            del self._counters[key]
        return len(expired)

    def cleanup(self) -> int:
        """Drop expired windows. Returns how many were removed."""
        return self._prune(self._clock())

    def __len__(self) -> int:
        return len(self._counters)
