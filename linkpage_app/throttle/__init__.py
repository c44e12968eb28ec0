"""
Per-client request throttling.
Implements Strategy Pattern for flexible counter backends.
"""

from .strategies import ThrottleStrategy, RedisThrottle, InMemoryThrottle, NullThrottle
from .factory import ThrottleFactory, ThrottleBackend

__all__ = [
    "ThrottleStrategy",
    "RedisThrottle",
    "InMemoryThrottle",
    "NullThrottle",
    "ThrottleFactory",
    "ThrottleBackend",
]
