"""
Redis cache backend implementation.
"""

from __future__ import annotations

import json
from typing import Any
from datetime import timedelta

import redis.asyncio as redis
from redis.exceptions import RedisError

from rolegate.core.exceptions import CacheUnavailable


class RedisCacheBackend:
    """
    Redis cache backend implementation.

    Usage:
        cache = RedisCacheBackend(redis_url="redis://localhost:6379/0", prefix="session:")
        await cache.connect()

        await cache.set(token, user.id, ttl=3600)
        user_id = await cache.get(token)
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "",
        default_ttl: int = 3600,
        max_connections: int = 10,
    ):
        self.redis_url = redis_url
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.max_connections = max_connections
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=self.max_connections,
            )

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise CacheUnavailable("Cache not connected. Call connect() first.")
        return self._client

    def _key(self, key: str) -> str:
        """Prepend prefix to key."""
        return f"{self.prefix}{key}" if self.prefix else key

    def _ttl_seconds(self, ttl: int | timedelta | None) -> int:
        """Convert TTL to seconds."""
        if ttl is None:
            return self.default_ttl
        if isinstance(ttl, timedelta):
            return int(ttl.total_seconds())
        return ttl

    def _serialize(self, value: Any) -> str:
        return json.dumps(value)

    def _deserialize(self, value: str | None) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    async def get(self, key: str) -> Any | None:
        """Get value by key."""
        try:
            value = await self.client.get(self._key(key))
        except RedisError as exc:
            raise CacheUnavailable() from exc
        return self._deserialize(value)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value with TTL (SET ... EX)."""
        try:
            result = await self.client.set(
                self._key(key),
                self._serialize(value),
                ex=self._ttl_seconds(ttl),
            )
        except RedisError as exc:
            raise CacheUnavailable() from exc
        return result is True

    async def delete(self, key: str) -> bool:
        """Delete key."""
        try:
            result = await self.client.delete(self._key(key))
        except RedisError as exc:
            raise CacheUnavailable() from exc
        return result > 0

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        try:
            result = await self.client.exists(self._key(key))
        except RedisError as exc:
            raise CacheUnavailable() from exc
        return result > 0

    async def ttl(self, key: str) -> int | None:
        """Get remaining TTL."""
        try:
            result = await self.client.ttl(self._key(key))
        except RedisError as exc:
            raise CacheUnavailable() from exc
        # -2 missing key, -1 no expiry
        return result if result >= 0 else None

    async def ping(self) -> bool:
        """Check connectivity."""
        try:
            return await self.client.ping()
        except RedisError:
            return False
