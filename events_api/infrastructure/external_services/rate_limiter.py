"""Fixed-window rate limiter backed by Redis"""

import logging
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...core.config import Settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter:
    """Counts attempts per key in windows of ``window_seconds``.

    The counter lives in Redis (``INCR`` + ``EXPIRE``), so limits hold across
    worker processes and nothing is kept in process memory. If Redis cannot
    be reached the attempt is allowed and the failure is logged.
    """

    def __init__(self, client, attempts: int, window_seconds: int, prefix: str = "ratelimit"):
        self.client = client
        self.attempts = attempts
        self.window_seconds = window_seconds
        self.prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        return cls(client, settings.AUTH_RATE_LIMIT_ATTEMPTS, settings.AUTH_RATE_LIMIT_WINDOW_SECONDS)

    async def hit(self, key: str) -> RateLimitResult:
        """Record one attempt for ``key`` and report whether it is within the limit"""
        bucket = f"{self.prefix}:{key}"
        try:
            count = await self.client.incr(bucket)
            if count == 1:
                await self.client.expire(bucket, self.window_seconds)
            ttl = await self.client.ttl(bucket)
            if ttl is None or ttl < 0:
                # Key survived without an expiry (e.g. EXPIRE lost); restart the window
                await self.client.expire(bucket, self.window_seconds)
                ttl = self.window_seconds
        except RedisError as e:
            logger.error("Rate limiter unavailable, allowing request: %s", e)
            return RateLimitResult(allowed=True, remaining=self.attempts)

        if count > self.attempts:
            return RateLimitResult(allowed=False, remaining=0, retry_after=int(ttl))
        return RateLimitResult(allowed=True, remaining=self.attempts - count)

    async def reset(self, key: str) -> None:
        try:
            await self.client.delete(f"{self.prefix}:{key}")
        except RedisError as e:
            logger.warning("Failed to reset rate limit for %s: %s", key, e)

    async def ping(self) -> Optional[bool]:
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self.client.aclose()
