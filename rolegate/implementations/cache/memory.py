"""
In-memory cache backend for development and testing.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable
from datetime import timedelta
from dataclasses import dataclass


@dataclass
class CacheEntry:
    """Cache entry with value and expiration (clock seconds)."""
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class MemoryCacheBackend:
    """
    In-memory cache backend.

    Not shared between processes. Expired entries are dropped lazily on
    access. Pass a custom ``clock`` to control expiry in tests.

    Usage:
        cache = MemoryCacheBackend()
        await cache.set(token, user.id, ttl=60)
    """

    def __init__(
        self,
        default_ttl: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.clock = clock
        self._data: dict[str, CacheEntry] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        self._data.clear()

    def _ttl_seconds(self, ttl: int | timedelta | None) -> float:
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, timedelta):
            return ttl.total_seconds()
        return ttl

    def _get_entry(self, key: str) -> CacheEntry | None:
        """Get entry, removing it if expired."""
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._get_entry(key)
        return entry.value if entry else None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        expires_at = self.clock() + self._ttl_seconds(ttl)
        self._data[key] = CacheEntry(value=value, expires_at=expires_at)
        return True

    async def delete(self, key: str) -> bool:
        if self._get_entry(key) is None:
            return False
        del self._data[key]
        return True

    async def exists(self, key: str) -> bool:
        return self._get_entry(key) is not None

    async def ttl(self, key: str) -> int | None:
        entry = self._get_entry(key)
        if entry is None or entry.expires_at is None:
            return None
        return max(0, math.ceil(entry.expires_at - self.clock()))

    async def ping(self) -> bool:
        return True
