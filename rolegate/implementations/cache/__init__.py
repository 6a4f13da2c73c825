"""Cache backend implementations."""

from rolegate.implementations.cache.redis import RedisCacheBackend
from rolegate.implementations.cache.memory import MemoryCacheBackend

__all__ = ["RedisCacheBackend", "MemoryCacheBackend"]
