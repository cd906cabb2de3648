"""
Concurrency safety tests.

Demonstrates:
1. Distributed lock prevents two workers from running the same drone tick.
2. Release never frees a lock that another holder now owns.
3. Cart stock guard rejects out-of-stock medicines before an order exists.
4. Merging cart adds never pushes a line past the per-line unit limit.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from medifly.domain.entities import (
    MAX_LINE_QUANTITY,
    CartError,
    Medicine,
    ensure_in_stock,
    merged_quantity,
)
from medifly.infrastructure.locks import DistributedLock, LockNotAcquired
from medifly.workers import drone as drone_worker


class TestStockGuard:
    def test_in_stock_passes(self):
        ensure_in_stock(Medicine(1, "Paracetamol", "", "Pain", 2.5))

    def test_out_of_stock_raises(self):
        medicine = Medicine(2, "Vitamin D3", "", "Vitamins", 8.0, in_stock=False)
        with pytest.raises(CartError, match="Vitamin D3 is out of stock"):
            ensure_in_stock(medicine)


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "drone_simulation", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "medifly:lock:drone_simulation", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "drone_simulation", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_compares_token(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "drone_simulation", ttl_seconds=10)
        await lock.acquire()
        assert await lock.release() is True

        args = mock_redis.eval.await_args.args
        assert args[1:] == (1, "medifly:lock:drone_simulation", lock.token)

    @pytest.mark.asyncio
    async def test_release_of_foreign_lock_is_noop(self):
        mock_redis = AsyncMock()
        mock_redis.eval = AsyncMock(return_value=0)

        lock = DistributedLock(mock_redis, "drone_simulation")
        assert await lock.release() is False

    def test_tokens_are_unique(self):
        mock_redis = AsyncMock()
        a = DistributedLock(mock_redis, "drone_simulation")
        b = DistributedLock(mock_redis, "drone_simulation")
        assert a.key == b.key
        assert a.token != b.token

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "drone_simulation", ttl_seconds=10)
        with pytest.raises(LockNotAcquired, match="Could not acquire lock"):
            async with lock:
                pass
        mock_redis.eval.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_manager_releases(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        async with DistributedLock(mock_redis, "drone_simulation"):
            pass
        mock_redis.eval.assert_awaited_once()


class TestDroneCycleLocking:
    @pytest.mark.asyncio
    async def test_skips_tick_when_lock_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        with (
            patch.object(drone_worker, "get_redis", AsyncMock(return_value=mock_redis)),
            patch.object(drone_worker, "async_session_factory") as session_factory,
        ):
            assert await drone_worker.run_drone_cycle() == 0

        session_factory.assert_not_called()
        mock_redis.eval.assert_not_called()

    @pytest.mark.asyncio
    async def test_lock_released_after_cycle(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        session = AsyncMock()
        session_factory = MagicMock()
        session_factory.return_value.__aenter__.return_value = session
        repo = MagicMock()
        repo.return_value.get_in_flight_for_update = AsyncMock(return_value=[])

        with (
            patch.object(drone_worker, "get_redis", AsyncMock(return_value=mock_redis)),
            patch.object(drone_worker, "async_session_factory", session_factory),
            patch.object(drone_worker, "OrderRepository", repo),
        ):
            assert await drone_worker.run_drone_cycle() == 0

        repo.assert_called_once_with(session)
        session.commit.assert_awaited_once()
        mock_redis.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lock_released_when_cycle_fails(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        session_factory = MagicMock()
        session_factory.return_value.__aenter__.return_value = AsyncMock()
        repo = MagicMock()
        repo.return_value.get_in_flight_for_update = AsyncMock(
            side_effect=RuntimeError("db down")
        )

        with (
            patch.object(drone_worker, "get_redis", AsyncMock(return_value=mock_redis)),
            patch.object(drone_worker, "async_session_factory", session_factory),
            patch.object(drone_worker, "OrderRepository", repo),
        ):
            assert await drone_worker.run_drone_cycle() == 0

        mock_redis.eval.assert_awaited_once()


class TestCartLineLimit:
    def test_merge_within_limit(self):
        assert merged_quantity(60, 40) == MAX_LINE_QUANTITY

    def test_merge_past_limit_rejected(self):
        with pytest.raises(CartError, match="at most 100"):
            merged_quantity(60, 41)
