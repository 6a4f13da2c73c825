"""
Cache backend protocol for the session store.
Implementations: RedisCacheBackend, MemoryCacheBackend
"""
from __future__ import annotations

from typing import Protocol, Any
from datetime import timedelta


class CacheBackend(Protocol):
    """
    Protocol for the key/value cache that backs sessions.

    Entries are written with a TTL and disappear once it elapses. Backends
    raise CacheUnavailable when the store cannot be reached.

    Example implementations:
    - RedisCacheBackend: Redis-based sessions shared between processes
    - MemoryCacheBackend: In-process dict (for testing/dev)
    """

    async def get(self, key: str) -> Any | None:
        """Get value by key. Returns None if not found or expired."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value with optional TTL (seconds or timedelta)."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if deleted, False if it was absent."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        ...

    async def ttl(self, key: str) -> int | None:
        """Get remaining TTL in seconds. None if no TTL or key missing."""
        ...

    async def ping(self) -> bool:
        """Check connectivity."""
        ...
