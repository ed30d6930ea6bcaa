from __future__ import annotations

import asyncio

import pytest

from inmemdb.data_type.locks import KeyLocks, RWLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
    lock = RWLock()
    await lock.acquire_read()
    await asyncio.wait_for(lock.acquire_read(), 0.1)
    assert lock.readers == 2
    lock.release_read()
    lock.release_read()
    assert not lock.locked()


@pytest.mark.asyncio
async def test_writer_excludes_readers_and_writers():
    lock = RWLock()
    await lock.acquire_write()

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(lock.acquire_read(), 0.05)
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(lock.acquire_write(), 0.05)

    lock.release_write()
    assert not lock.locked()
    await asyncio.wait_for(lock.acquire_write(), 0.1)
    lock.release_write()


@pytest.mark.asyncio
async def test_waiting_writer_is_served_before_later_readers():
    lock = RWLock()
    order = []

    await lock.acquire_read()

    async def writer():
        async with lock.writer():
            order.append("writer")

    async def late_reader():
        async with lock.reader():
            order.append("reader")

    w = asyncio.create_task(writer())
    await asyncio.sleep(0)
    r = asyncio.create_task(late_reader())
    await asyncio.sleep(0)
    assert order == []

    lock.release_read()
    await asyncio.gather(w, r)
    assert order == ["writer", "reader"]


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_block_others():
    lock = RWLock()
    await lock.acquire_read()

    blocked = asyncio.create_task(lock.acquire_write())
    await asyncio.sleep(0)
    blocked.cancel()
    with pytest.raises(asyncio.CancelledError):
        await blocked

    # the cancelled writer no longer holds back new readers
    await asyncio.wait_for(lock.acquire_read(), 0.1)
    lock.release_read()
    lock.release_read()
    assert not lock.locked()


@pytest.mark.asyncio
async def test_key_locks_hand_out_one_lock_per_key_and_drop_idle_entries():
    locks = KeyLocks()
    seen = []

    async def holder():
        async with locks.write("k"):
            seen.append(locks.get("k"))
            await asyncio.sleep(0.01)

    await asyncio.gather(holder(), holder(), holder())
    assert len(seen) == 3
    assert seen[0] is seen[1] is seen[2]
    assert "k" not in locks
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_key_locks_serialize_writers_on_the_same_key():
    locks = KeyLocks()
    inside = 0
    peak = 0

    async def writer():
        nonlocal inside, peak
        async with locks.write("k"):
            inside += 1
            peak = max(peak, inside)
            await asyncio.sleep(0.005)
            inside -= 1

    await asyncio.gather(*(writer() for _ in range(10)))
    assert peak == 1


@pytest.mark.asyncio
async def test_key_locks_do_not_couple_different_keys():
    locks = KeyLocks()
    async with locks.write("a"):
        async with locks.write("b"):
            assert len(locks) == 2
