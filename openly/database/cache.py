"""Redis cache for short link resolution."""

import logging
from typing import Optional

import redis.asyncio as redis


class RedisCache:
    """Read-through cache of short_id -> long_url.

    Disabled when no URL is configured or when the initial connection fails;
    a disabled cache answers every lookup with a miss.
    """

    KEY_PREFIX = "openly:link:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL for cached entries
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if self.enabled:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except redis.RedisError as e:
            self.logger.error(f"Failed to connect to Redis, caching disabled: {e}")
            self.enabled = False

    def key_for(self, short_id: str) -> str:
        return f"{self.KEY_PREFIX}{short_id}"

    async def get(self, short_id: str) -> Optional[str]:
        """Cached long URL for short_id, or None on miss or error."""
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.key_for(short_id))
        except redis.RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, short_id: str, long_url: str) -> bool:
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.key_for(short_id), self.ttl_seconds, long_url)
            return True
        except redis.RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, short_id: str) -> bool:
        if not self.enabled or not self.client:
            return False

        try:
            return await self.client.delete(self.key_for(short_id)) > 0
        except redis.RedisError as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """True when the cache is disabled or reachable."""
        if not self.enabled or not self.client:
            return True

        try:
            return bool(await self.client.ping())
        except redis.RedisError:
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")
