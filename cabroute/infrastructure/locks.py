"""
Per-resource exclusive locks.

The booking lifecycle wraps the availability check and reservation commit
for a vehicle in ``async with locks.hold(vehicle_id)``, so at most one
create/transition is in flight per vehicle.  Different vehicles proceed
concurrently.

* ``LocalLockManager`` -- one ``asyncio.Lock`` per key; enough for a
  single API process.
* ``RedisLockManager`` -- ``DistributedLock`` per key for deployments with
  several API processes.  Acquire uses SET NX EX and release a Lua script
  for atomic check-and-delete.

Both wait at most ``wait_seconds`` and then raise ``ResourceBusy``.
"""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis

from cabroute.domain.errors import ResourceBusy


class LockManager(ABC):
    @abstractmethod
    def hold(self, key: str) -> AsyncIterator[None]:
        """Async context manager holding the exclusive lock for *key*."""


class LocalLockManager(LockManager):
    def __init__(self, wait_seconds: float = 5.0):
        self.wait_seconds = wait_seconds
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return bool(lock and lock.locked())

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._lock_for(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.wait_seconds)
        except asyncio.TimeoutError:
            raise ResourceBusy(f"Timed out waiting for lock: {key}") from None
        try:
            yield
        finally:
            lock.release()


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def acquire_within(
        self, wait_seconds: float, poll_interval: float = 0.05
    ) -> bool:
        """Poll ``acquire`` until it succeeds or *wait_seconds* elapse."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + wait_seconds
        while True:
            if await self.acquire():
                return True
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(poll_interval)

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)


class RedisLockManager(LockManager):
    def __init__(
        self,
        client: aioredis.Redis,
        ttl_seconds: int = 30,
        wait_seconds: float = 5.0,
        namespace: str = "cabroute",
    ):
        self.redis = client
        self.ttl_seconds = ttl_seconds
        self.wait_seconds = wait_seconds
        self.namespace = namespace

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = DistributedLock(
            self.redis, f"{self.namespace}:{key}", ttl_seconds=self.ttl_seconds
        )
        if not await lock.acquire_within(self.wait_seconds):
            raise ResourceBusy(f"Timed out waiting for lock: {lock.key}")
        try:
            yield
        finally:
            await lock.release()
