"""Tests for KeyedLock."""

import asyncio

from broker.utils.keyed_lock import KeyedLock


class TestKeyedLock:
    """SUT: KeyedLock"""

    async def test_serializes_same_key(self):
        """Holders of the same key run one at a time."""
        locks = KeyedLock()
        order = []

        async def worker(name, delay):
            async with locks.acquire("seller"):
                order.append(f"{name}-start")
                await asyncio.sleep(delay)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a", 0.02), worker("b", 0))
        assert order == ["a-start", "a-end", "b-start", "b-end"]

    async def test_different_keys_run_concurrently(self):
        """Different keys do not block each other."""
        locks = KeyedLock()
        inside = asyncio.Event()

        async def holder():
            async with locks.acquire("one"):
                await inside.wait()

        task = asyncio.create_task(holder())
        await asyncio.sleep(0)
        async with locks.acquire("two"):
            assert locks.locked("one")
            assert locks.locked("two")
        inside.set()
        await task

    async def test_locks_are_released(self):
        """Idle locks are dropped after release."""
        locks = KeyedLock()
        async with locks.acquire("seller"):
            assert len(locks) == 1
        assert len(locks) == 0
        assert not locks.locked("seller")
