# tests/test_locks.py — Per-key asyncio locks
import asyncio

import pytest

from locks import KeyedLocks


@pytest.mark.asyncio
async def test_same_key_serialises():
    locks = KeyedLocks("test")
    events = []

    async def worker(name):
        async with locks.hold([1]):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert events in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])


@pytest.mark.asyncio
async def test_opposite_order_does_not_deadlock():
    locks = KeyedLocks("test")

    async def worker(keys):
        async with locks.hold(keys):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(asyncio.gather(worker([1, 2]), worker([2, 1])), timeout=2)


@pytest.mark.asyncio
async def test_released_on_error():
    locks = KeyedLocks("test")
    with pytest.raises(RuntimeError):
        async with locks.hold([7, 8]):
            assert locks.is_locked(7) and locks.is_locked(8)
            raise RuntimeError("boom")
    assert not locks.is_locked(7)
    assert not locks.is_locked(8)


@pytest.mark.asyncio
async def test_duplicate_keys_acquired_once():
    locks = KeyedLocks("test")
    async with locks.hold([3, 3]):
        assert locks.is_locked(3)
    assert not locks.is_locked(3)
