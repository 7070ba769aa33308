"""Rate limiting capability injected into the application services.

The core never holds global limiter state: each service receives a limiter
and calls ``hit(key, limit, window_seconds)`` before a mutation.

Redis implementation is a fixed window, opened and counted in one MULTI/EXEC:
    SET key 0 EX window NX
    count = INCR key
    if count > limit: DECR key; raise RateLimitError
A rejected hit is given back, so the counter only tracks accepted mutations.
Key pattern: "ratelimit:{action}:{owner_id}".
"""

import logging
from typing import Protocol

import redis.asyncio as aioredis

from config.settings import settings
from src.bk_common.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiterProtocol(Protocol):
    async def hit(self, key: str, limit: int, window_seconds: int) -> None: ...


class NoopRateLimiter:
    """Used when RATE_LIMIT_ENABLED is false and in unit tests."""

    async def hit(self, key: str, limit: int, window_seconds: int) -> None:
        return None


class RedisRateLimiter:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def hit(self, key: str, limit: int, window_seconds: int) -> None:
        redis_key = f"ratelimit:{key}"
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(redis_key, 0, ex=window_seconds, nx=True)
            pipe.incr(redis_key)
            _, count = await pipe.execute()
        if count > limit:
            await self._redis.decr(redis_key)
            logger.info("Rate limit hit: key=%s count=%d limit=%d", key, count, limit)
            raise RateLimitError()


def create_redis() -> aioredis.Redis:
    return aioredis.from_url(settings.REDIS_URL, decode_responses=True)


def build_rate_limiter(redis: aioredis.Redis | None) -> RateLimiterProtocol:
    if not settings.RATE_LIMIT_ENABLED or redis is None:
        return NoopRateLimiter()
    return RedisRateLimiter(redis)
