"""
Concurrency safety tests.

Demonstrates:
1. The local per-vehicle lock serialises holders of the same key only.
2. A lock that cannot be entered in time raises ``ResourceBusy``.
3. Distributed lock prevents simultaneous acquire.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from cabroute.domain.errors import ResourceBusy
from cabroute.infrastructure.locks import (
    DistributedLock,
    LocalLockManager,
    RedisLockManager,
)


class TestLocalLockManager:
    @pytest.mark.asyncio
    async def test_same_key_is_serialised(self):
        locks = LocalLockManager(wait_seconds=1.0)
        order: list[str] = []

        async def worker(name: str):
            async with locks.hold("V1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self):
        locks = LocalLockManager(wait_seconds=0.05)
        async with locks.hold("V1"):
            async with locks.hold("V2"):
                assert locks.locked("V1")
                assert locks.locked("V2")

    @pytest.mark.asyncio
    async def test_timeout_raises_resource_busy(self):
        locks = LocalLockManager(wait_seconds=0.01)
        async with locks.hold("V1"):
            with pytest.raises(ResourceBusy):
                async with locks.hold("V1"):
                    pass
        assert not locks.locked("V1")

    @pytest.mark.asyncio
    async def test_released_after_exception(self):
        locks = LocalLockManager(wait_seconds=0.05)
        with pytest.raises(ValueError):
            async with locks.hold("V1"):
                raise ValueError("boom")
        async with locks.hold("V1"):
            assert locks.locked("V1")


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "vehicle-1", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:vehicle-1", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "vehicle-1", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_calls_eval(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "vehicle-1", ttl_seconds=10)
        await lock.acquire()
        await lock.release()

        mock_redis.eval.assert_called_once()
        args = mock_redis.eval.call_args.args
        assert args[1:] == (1, "lock:vehicle-1", lock.token)

    @pytest.mark.asyncio
    async def test_acquire_within_retries_until_free(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(side_effect=[None, None, True])

        lock = DistributedLock(mock_redis, "vehicle-1")
        assert await lock.acquire_within(1.0, poll_interval=0.001) is True
        assert mock_redis.set.await_count == 3

    @pytest.mark.asyncio
    async def test_acquire_within_gives_up(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "vehicle-1")
        assert await lock.acquire_within(0.01, poll_interval=0.001) is False


class TestRedisLockManager:
    @pytest.mark.asyncio
    async def test_hold_acquires_and_releases_namespaced_key(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        locks = RedisLockManager(mock_redis, ttl_seconds=15, wait_seconds=0.1)
        async with locks.hold("V1"):
            mock_redis.eval.assert_not_called()

        key = mock_redis.set.call_args.args[0]
        assert key == "lock:cabroute:V1"
        assert mock_redis.set.call_args.kwargs == {"nx": True, "ex": 15}
        mock_redis.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hold_times_out(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        locks = RedisLockManager(mock_redis, wait_seconds=0.01)
        with pytest.raises(ResourceBusy):
            async with locks.hold("V1"):
                pass
        mock_redis.eval.assert_not_called()

    @pytest.mark.asyncio
    async def test_release_runs_after_error(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        locks = RedisLockManager(mock_redis, wait_seconds=0.1)
        with pytest.raises(ValueError):
            async with locks.hold("V1"):
                raise ValueError("boom")
        mock_redis.eval.assert_awaited_once()
