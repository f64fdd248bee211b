"""Per-identity mutual exclusion.

Two requests of the same identity must not interleave their
session read, thread creation and session upsert. The in-memory lock
covers a single process; the Redis lock covers a fleet.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from threadline.db.errors import ConnectionError
from threadline.observability.logging import get_logger

logger = get_logger(__name__)


class IdentityLock(ABC):
    """Exclusive lock scoped to one user identity."""

    @abstractmethod
    def acquire(
        self, identity: str, blocking_timeout: float | None = None
    ) -> AbstractAsyncContextManager[bool]:
        """Async context manager yielding True if the lock was acquired."""
        pass

    async def health_check(self) -> bool:
        """Return True if the lock backend is usable."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
        return None


class InMemoryIdentityLock(IdentityLock):
    """asyncio-based lock for single-process deployments.

    One asyncio.Lock per identity, dropped again once no request holds
    or waits for it.
    """

    def __init__(self, blocking_timeout: float = 5.0) -> None:
        self._blocking_timeout = blocking_timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(
        self, identity: str, blocking_timeout: float | None = None
    ) -> AsyncGenerator[bool, None]:
        """Acquire the identity's lock, waiting at most blocking_timeout."""
        timeout = blocking_timeout or self._blocking_timeout
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._waiters[identity] = self._waiters.get(identity, 0) + 1

        acquired = False
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=timeout)
                acquired = True
            except TimeoutError:
                logger.warning("identity_lock_timeout", timeout=timeout)
            yield acquired
        finally:
            if acquired:
                lock.release()
            self._waiters[identity] -= 1
            if self._waiters[identity] == 0:
                del self._waiters[identity]
                self._locks.pop(identity, None)

    def is_locked(self, identity: str) -> bool:
        """Check if an identity is currently locked."""
        lock = self._locks.get(identity)
        return lock is not None and lock.locked()


class RedisIdentityLock(IdentityLock):
    """Redis-backed distributed lock for multi-process deployments.

    Lock key format: threadline:lock:{identity}
    """

    def __init__(
        self,
        redis: Redis,
        lock_timeout: int = 120,
        blocking_timeout: float = 5.0,
    ):
        """Initialize identity lock.

        Args:
            redis: Redis client instance
            lock_timeout: How long lock is held before auto-release (seconds)
            blocking_timeout: How long to wait when trying to acquire (seconds)
        """
        self._redis = redis
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout

    def _key(self, identity: str) -> str:
        return f"threadline:lock:{identity}"

    @asynccontextmanager
    async def acquire(
        self, identity: str, blocking_timeout: float | None = None
    ) -> AsyncGenerator[bool, None]:
        """Acquire the identity's lock, waiting at most blocking_timeout."""
        timeout = blocking_timeout or self._blocking_timeout

        lock = self._redis.lock(
            self._key(identity),
            timeout=self._lock_timeout,
            blocking_timeout=timeout,
        )

        try:
            acquired = bool(await lock.acquire())
        except RedisError as e:
            logger.error("identity_lock_backend_error", error=str(e))
            raise ConnectionError(f"Failed to acquire identity lock: {e}", cause=e) from e

        if not acquired:
            logger.warning("identity_lock_timeout", timeout=timeout)
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await lock.release()
                except LockError:
                    # Expired while held; another holder may already own it
                    logger.warning("identity_lock_expired_before_release")

    async def health_check(self) -> bool:
        """Return True if Redis answers a ping."""
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning("redis_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close the Redis client."""
        await self._redis.aclose()
