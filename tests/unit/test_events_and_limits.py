"""Tests for bk_common.events and bk_common.rate_limit."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.bk_common.errors import RateLimitError
from src.bk_common.events import EntryCreated, EntryUpdated, EventPublisher
from src.bk_common.rate_limit import NoopRateLimiter, RedisRateLimiter, build_rate_limiter


class TestEventPublisher:
    async def test_delivers_to_every_subscriber(self) -> None:
        publisher = EventPublisher()
        first, second = AsyncMock(), AsyncMock()
        publisher.subscribe(first)
        publisher.subscribe(second)

        event = EntryUpdated(owner_id="o", entry_id="e")
        await publisher.publish(event)

        first.assert_awaited_once_with(event)
        second.assert_awaited_once_with(event)

    async def test_failing_subscriber_does_not_stop_others(self) -> None:
        publisher = EventPublisher()
        broken = AsyncMock(side_effect=RuntimeError("cache down"))
        healthy = AsyncMock()
        publisher.subscribe(broken)
        publisher.subscribe(healthy)

        await publisher.publish(EntryCreated(owner_id="o", entry_id="e", entry_date=None))  # type: ignore[arg-type]

        healthy.assert_awaited_once()

    def test_events_carry_timestamp(self) -> None:
        assert EntryUpdated(owner_id="o", entry_id="e").occurred_at.tzinfo is not None


class TestRedisRateLimiter:
    @staticmethod
    def _redis(count: int) -> tuple[MagicMock, MagicMock]:
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[None, count])
        redis = MagicMock()
        redis.pipeline.return_value.__aenter__.return_value = pipe
        redis.decr = AsyncMock()
        return redis, pipe

    async def test_window_opened_and_counted_atomically(self) -> None:
        redis, pipe = self._redis(1)
        await RedisRateLimiter(redis).hit("settlement:o", 200, 3600)
        redis.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_called_once_with("ratelimit:settlement:o", 0, ex=3600, nx=True)
        pipe.incr.assert_called_once_with("ratelimit:settlement:o")
        pipe.execute.assert_awaited_once()

    async def test_within_limit(self) -> None:
        redis, _ = self._redis(200)
        await RedisRateLimiter(redis).hit("settlement:o", 200, 3600)
        redis.decr.assert_not_awaited()

    async def test_over_limit_gives_the_hit_back(self) -> None:
        redis, _ = self._redis(201)
        with pytest.raises(RateLimitError):
            await RedisRateLimiter(redis).hit("settlement:o", 200, 3600)
        redis.decr.assert_awaited_once_with("ratelimit:settlement:o")

    def test_no_redis_means_no_limit(self) -> None:
        assert isinstance(build_rate_limiter(None), NoopRateLimiter)
