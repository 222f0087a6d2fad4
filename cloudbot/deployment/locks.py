"""At most one in-flight deploy or destroy per scenario."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import LockError

from cloudbot.errors import ScenarioBusyError
from cloudbot.observability.logging import get_logger

logger = get_logger(__name__)


class ScenarioLock(ABC):
    """Non-blocking per-scenario mutual exclusion.

    ``hold`` raises ScenarioBusyError instead of waiting when the scenario
    is already locked.
    """

    @abstractmethod
    def hold(self, scenario_id: UUID) -> AbstractAsyncContextManager[None]:
        """Context manager that owns the scenario for its duration."""
        pass


class InMemoryScenarioLock(ScenarioLock):
    """Process-local locks keyed by scenario id.

    Only held scenarios have an entry; it is dropped on release.
    """

    def __init__(self) -> None:
        self._locks: dict[UUID, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, scenario_id: UUID) -> bool:
        lock = self._locks.get(scenario_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, scenario_id: UUID) -> AsyncGenerator[None, None]:
        lock = self._locks.setdefault(scenario_id, asyncio.Lock())
        if lock.locked():
            raise ScenarioBusyError(f"Scenario {scenario_id} has an operation in flight")
        try:
            async with lock:
                yield
        finally:
            if not lock.locked() and self._locks.get(scenario_id) is lock:
                del self._locks[scenario_id]


class RedisScenarioLock(ScenarioLock):
    """Redis-backed lock shared by every process using the same Redis.

    Lock key format: cloudbot:scenario-lock:{scenario_id}
    """

    def __init__(self, redis: Redis, lock_timeout: float = 3600.0) -> None:
        self._redis = redis
        self._lock_timeout = lock_timeout

    def _key(self, scenario_id: UUID) -> str:
        return f"cloudbot:scenario-lock:{scenario_id}"

    async def is_locked(self, scenario_id: UUID) -> bool:
        return await self._redis.exists(self._key(scenario_id)) > 0

    @asynccontextmanager
    async def hold(self, scenario_id: UUID) -> AsyncGenerator[None, None]:
        lock = self._redis.lock(self._key(scenario_id), timeout=self._lock_timeout)
        if not await lock.acquire(blocking=False):
            raise ScenarioBusyError(f"Scenario {scenario_id} has an operation in flight")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("scenario_lock_expired", scenario_id=str(scenario_id))
