"""
Key-value stores backing the token cache.
"""

from typing import Optional, Protocol

import redis.asyncio as redis

from shared.logging import get_logger
from shared.errors import CacheUnavailableError


class TokenStore(Protocol):
    """Narrow store interface consumed by the token cache manager."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str, ttl: int) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class RedisTokenStore:
    """Redis-backed token store."""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.logger = get_logger("proxy.cache.redis")
        self.redis: Optional[redis.Redis] = None

    def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )
        return self.redis

    async def start(self):
        """Connect and ping; an unreachable server is not fatal."""
        try:
            await self._get_redis().ping()
            self.logger.info("Connected to Redis")
        except redis.RedisError as e:
            self.logger.warning("Redis not ready, token cache degraded", error=str(e))

    async def stop(self):
        """Close the Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._get_redis().get(key)
        except redis.RedisError as e:
            raise CacheUnavailableError("Token cache read failed", details={"error": str(e)}) from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._get_redis().setex(key, ttl, value)
        except redis.RedisError as e:
            raise CacheUnavailableError("Token cache write failed", details={"error": str(e)}) from e

    async def delete(self, key: str) -> None:
        try:
            await self._get_redis().delete(key)
        except redis.RedisError as e:
            raise CacheUnavailableError("Token cache delete failed", details={"error": str(e)}) from e

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._get_redis().ping()
            return True
        except redis.RedisError:
            return False
