"""
Picks the request counter behind the rate limiter.

One counter serves the whole process. RATE_LIMIT_BACKEND chooses it; a Redis
that can't be reached at startup degrades to per-process counting instead of
refusing to boot.
"""

import logging
from enum import Enum

from .strategies import ThrottleStrategy, RedisThrottle, InMemoryThrottle, NullThrottle
from linkpage_app.config import settings

logger = logging.getLogger(__name__)


class ThrottleBackend(Enum):
    """Where request counts are kept"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class ThrottleFactory:
    """
    Builds the process-wide request counter on first use.

    Later calls return the same counter whatever backend they ask for, so
    every request is counted against one set of windows.
    """

    _instance: ThrottleStrategy = None

    @classmethod
    def create(cls, backend: ThrottleBackend) -> ThrottleStrategy:
        """
        Return the request counter, building it for `backend` on first call.

        Raises:
            ValueError: `backend` is not a ThrottleBackend
        """
        if cls._instance is None:
            cls._instance = cls._build(backend)
        return cls._instance

    @classmethod
    def _build(cls, backend: ThrottleBackend) -> ThrottleStrategy:
        if backend == ThrottleBackend.REDIS:
            return cls._connect_redis()
        if backend == ThrottleBackend.MEMORY:
            logger.info("Counting requests in process memory")
            return InMemoryThrottle()
        if backend == ThrottleBackend.NULL:
            logger.info("Rate limiting disabled")
            return NullThrottle()
        raise ValueError(f"Unknown rate limit backend: {backend}")

    @staticmethod
    def _connect_redis() -> ThrottleStrategy:
        import redis

        redis_client = redis.from_url(
            settings.redis_url,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            redis_client.ping()
        except redis.RedisError as e:
            logger.warning("Redis unreachable (%s); counting requests per process instead", e)
            return InMemoryThrottle()

        logger.info("Counting requests in Redis")
        return RedisThrottle(redis_client)

    @classmethod
    def clear_instance(cls):
        """Forget the counter so the next create() builds a fresh one"""
        cls._instance = None
