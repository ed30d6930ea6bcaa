from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque, Dict, Tuple


class RWLock:
    """Many readers or one writer, granted in arrival order.

    Release never awaits, so a cancelled holder always gives the lock back.
    """

    def __init__(self):
        self._readers = 0
        self._writer = False
        self._waiters: Deque[Tuple[bool, asyncio.Future]] = deque()  # (is_writer, future)
        self.users = 0  # holders + waiters, maintained by KeyLocks

    @property
    def readers(self) -> int:
        return self._readers

    def locked(self) -> bool:
        return self._writer or self._readers > 0

    async def acquire_read(self) -> None:
        if not self._writer and not self._waiters:
            self._readers += 1
            return
        await self._wait(False)

    async def acquire_write(self) -> None:
        if not self._writer and self._readers == 0 and not self._waiters:
            self._writer = True
            return
        await self._wait(True)

    def release_read(self) -> None:
        self._readers -= 1
        if self._readers == 0:
            self._wake()

    def release_write(self) -> None:
        self._writer = False
        self._wake()

    async def _wait(self, is_writer: bool) -> None:
        fut = asyncio.get_running_loop().create_future()
        entry = (is_writer, fut)
        self._waiters.append(entry)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # granted in the same tick we were cancelled
                if is_writer:
                    self.release_write()
                else:
                    self.release_read()
            else:
                self._waiters.remove(entry)
                self._wake()
            raise

    def _wake(self) -> None:
        while self._waiters:
            is_writer, fut = self._waiters[0]
            if fut.done():
                self._waiters.popleft()
                continue
            if is_writer:
                if self._writer or self._readers:
                    return
                self._waiters.popleft()
                self._writer = True
                fut.set_result(None)
                return
            if self._writer:
                return
            self._waiters.popleft()
            self._readers += 1
            fut.set_result(None)

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[None]:
        await self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @asynccontextmanager
    async def writer(self) -> AsyncIterator[None]:
        await self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class KeyLocks:
    """Table of per-key RWLocks.

    Entries are created under ``_struct_lock``. Tasks asking for the same key
    always get the same lock object, and an entry is dropped once nobody
    holds or waits on it. Leaving a lock never awaits, so a command whose
    handler finished its write cannot then be reported as timed out.
    """

    def __init__(self):
        self._struct_lock = asyncio.Lock()
        self._locks: Dict[str, RWLock] = {}

    async def _checkout(self, key: str) -> RWLock:
        async with self._struct_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = RWLock()
                self._locks[key] = lock
            lock.users += 1
            return lock

    def _checkin(self, key: str, lock: RWLock) -> None:
        # _checkout never awaits while holding _struct_lock
        lock.users -= 1
        if lock.users == 0 and self._locks.get(key) is lock:
            del self._locks[key]

    @asynccontextmanager
    async def read(self, key: str) -> AsyncIterator[None]:
        lock = await self._checkout(key)
        try:
            async with lock.reader():
                yield
        finally:
            self._checkin(key, lock)

    @asynccontextmanager
    async def write(self, key: str) -> AsyncIterator[None]:
        lock = await self._checkout(key)
        try:
            async with lock.writer():
                yield
        finally:
            self._checkin(key, lock)

    def get(self, key: str):
        return self._locks.get(key)

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: str) -> bool:
        return key in self._locks
