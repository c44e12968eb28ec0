"""
Rate limit strategies using Strategy Pattern.
Allows switching between different counter backends (Redis, In-Memory, Null).

All strategies implement a fixed window: the first hit for a key opens a
window of `window` seconds, and every hit inside it bumps the same counter.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


class ThrottleStrategy(ABC):
    """
    Abstract base class for rate limit counters.

    Methods are async because the Redis backend does network I/O; the
    request dependency awaits them the same way for every backend.
    """

    @abstractmethod
    async def hit(self, key: str, window: int) -> int:
        """
        Record one request for `key`.

        Args:
            key: Counter key (one per client IP)
            window: Window length in seconds

        Returns:
            Number of requests seen for `key` in the current window
        """
        pass

    @abstractmethod
    async def reset(self) -> bool:
        """
        Drop every counter.

        Returns:
            True if successful
        """
        pass


class RedisThrottle(ThrottleStrategy):
    """
    Redis counter shared by every worker process.

    INCR and EXPIRE NX go out together in one MULTI/EXEC pipeline: the key
    gets its TTL on the first hit of a window and keeps it, so it disappears
    (and the window resets) when the TTL runs out. EXPIRE NX needs Redis 7.
    Redis failures are logged and the request is let through.
    """

    def __init__(self, redis_client, prefix: str = "ratelimit:"):
        """
        Initialize Redis throttle.

        Args:
            redis_client: Redis client instance (redis.Redis)
            prefix: Key namespace
        """
        self.redis = redis_client
        self.prefix = prefix

    async def hit(self, key: str, window: int) -> int:
        redis_key = f"{self.prefix}{key}"
        try:
            pipe = self.redis.pipeline()
            pipe.incr(redis_key)
            pipe.expire(redis_key, window, nx=True)
            count, _ = pipe.execute()
            return int(count)
        except Exception as e:
            logger.warning("Redis rate limit error: %s", e)
            return 0

    async def reset(self) -> bool:
        try:
            for redis_key in self.redis.scan_iter(match=f"{self.prefix}*"):
                self.redis.delete(redis_key)
            return True
        except Exception as e:
            logger.warning("Redis rate limit reset error: %s", e)
            return False


class InMemoryThrottle(ThrottleStrategy):
    """
    Process-local counters in a dict.

    Good for development and tests. Each worker process counts on its own,
    so with N workers a client effectively gets N times the limit.

    Expired windows are swept out at most once per window length, so the
    dict only holds clients seen within roughly the last two windows.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._windows)

    async def hit(self, key: str, window: int) -> int:
        now = self._clock()
        if now - self._last_sweep >= window:
            self._sweep(now, window)
        started, count = self._windows.get(key, (now, 0))
        if now - started >= window:
            started, count = now, 0
        count += 1
        self._windows[key] = (started, count)
        return count

    async def reset(self) -> bool:
        self._windows.clear()
        return True

    def _sweep(self, now: float, window: int) -> None:
        self._windows = {
            key: (started, count)
            for key, (started, count) in self._windows.items()
            if now - started < window
        }
        self._last_sweep = now


class NullThrottle(ThrottleStrategy):
    """
    Null Object Pattern - limiter that never counts.

    Used to switch rate limiting off entirely.
    """

    async def hit(self, key: str, window: int) -> int:
        """Always reports zero requests"""
        return 0

    async def reset(self) -> bool:
        return True
