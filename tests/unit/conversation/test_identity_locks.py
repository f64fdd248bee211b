"""Tests for per-identity locks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

from threadline.conversation import InMemoryIdentityLock, RedisIdentityLock
from threadline.db.errors import ConnectionError


class TestInMemoryIdentityLock:
    """Tests for InMemoryIdentityLock."""

    @pytest.mark.asyncio
    async def test_acquire_and_release(self) -> None:
        lock = InMemoryIdentityLock()

        async with lock.acquire("a@x.com") as acquired:
            assert acquired is True
            assert lock.is_locked("a@x.com")

        assert not lock.is_locked("a@x.com")
        assert lock._locks == {}

    @pytest.mark.asyncio
    async def test_same_identity_times_out(self) -> None:
        lock = InMemoryIdentityLock(blocking_timeout=0.05)

        async with lock.acquire("a@x.com"):
            async with lock.acquire("a@x.com") as second:
                assert second is False

    @pytest.mark.asyncio
    async def test_different_identities_independent(self) -> None:
        lock = InMemoryIdentityLock(blocking_timeout=0.05)

        async with lock.acquire("a@x.com") as first:
            async with lock.acquire("b@x.com") as second:
                assert first is True
                assert second is True

    @pytest.mark.asyncio
    async def test_serializes_same_identity(self) -> None:
        lock = InMemoryIdentityLock(blocking_timeout=1.0)
        order: list[str] = []

        async def turn(name: str) -> None:
            async with lock.acquire("a@x.com") as acquired:
                assert acquired
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(turn("one"), turn("two"))

        assert order in (
            ["one-start", "one-end", "two-start", "two-end"],
            ["two-start", "two-end", "one-start", "one-end"],
        )


class TestRedisIdentityLock:
    """Tests for RedisIdentityLock."""

    @pytest.fixture
    def redis_lock(self) -> MagicMock:
        redis_lock = MagicMock()
        redis_lock.acquire = AsyncMock(return_value=True)
        redis_lock.release = AsyncMock()
        return redis_lock

    @pytest.fixture
    def redis(self, redis_lock: MagicMock) -> MagicMock:
        redis = MagicMock()
        redis.lock.return_value = redis_lock
        redis.ping = AsyncMock(return_value=True)
        redis.aclose = AsyncMock()
        return redis

    @pytest.mark.asyncio
    async def test_acquire_uses_identity_key(self, redis: MagicMock, redis_lock: MagicMock) -> None:
        lock = RedisIdentityLock(redis, lock_timeout=60, blocking_timeout=2.0)

        async with lock.acquire("a@x.com") as acquired:
            assert acquired is True

        redis.lock.assert_called_once_with(
            "threadline:lock:a@x.com", timeout=60, blocking_timeout=2.0
        )
        redis_lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_acquired_skips_release(
        self, redis: MagicMock, redis_lock: MagicMock
    ) -> None:
        redis_lock.acquire.return_value = False
        lock = RedisIdentityLock(redis)

        async with lock.acquire("a@x.com") as acquired:
            assert acquired is False

        redis_lock.release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_error_raises_store_error(
        self, redis: MagicMock, redis_lock: MagicMock
    ) -> None:
        redis_lock.acquire.side_effect = RedisConnectionError("down")
        lock = RedisIdentityLock(redis)

        with pytest.raises(ConnectionError):
            async with lock.acquire("a@x.com"):
                pass

    @pytest.mark.asyncio
    async def test_expired_lock_release_is_logged(
        self, redis: MagicMock, redis_lock: MagicMock
    ) -> None:
        redis_lock.release.side_effect = LockError("expired")
        lock = RedisIdentityLock(redis)

        async with lock.acquire("a@x.com") as acquired:
            assert acquired is True

    @pytest.mark.asyncio
    async def test_health_check(self, redis: MagicMock) -> None:
        lock = RedisIdentityLock(redis)

        assert await lock.health_check() is True
        redis.ping.side_effect = RedisConnectionError("down")
        assert await lock.health_check() is False
