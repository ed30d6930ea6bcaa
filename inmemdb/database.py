import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from inmemdb.data_type.kvstore import KVStore
from inmemdb.data_type.locks import KeyLocks
from inmemdb.data_type.queue import QueueStore
from inmemdb.errors import KeyNotFound, QueueEmpty
from inmemdb.operation import Cmd, Condition, Operation
from inmemdb.registry import db_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreValue:
    value: str


class InMemoryDb:
    """Scalar entries and FIFO queues, one handler per canonical command.

    Scalar keys and queue keys live in separate maps with separate lock
    tables, so ``SET q x`` and ``QPUSH q y`` never contend.
    """

    def __init__(self, clock: Callable[[], float] = time.time, handler_delay: float = 0.0):
        self.data = KVStore(clock)
        self.queues = QueueStore()
        self.data_locks = KeyLocks()
        self.queue_locks = KeyLocks()
        self._handler_delay = handler_delay

    @db_command(Cmd.SET)
    async def set(self, query: Operation) -> Optional[StoreValue]:
        key = query.key
        async with self.data_locks.write(key):
            if self._handler_delay:
                await asyncio.sleep(self._handler_delay)

            # NX -> only if absent, XX -> only if present; otherwise a silent no-op
            if query.condition is Condition.NX and self.data.exists(key):
                return None
            if query.condition is Condition.XX and not self.data.exists(key):
                return None

            self.data.put(key, self.data.make_entry(query.value, query.expiry))
        return None

    @db_command(Cmd.GET)
    async def get(self, query: Operation) -> Optional[StoreValue]:
        key = query.key
        async with self.data_locks.read(key):
            ent = self.data.get_entry(key)
            if ent is None:
                raise KeyNotFound()
            if not ent.is_expired(self.data.now()):
                return StoreValue(ent.value)

        # Passive expiry: the entry may have been rewritten while we were unlocked
        async with self.data_locks.write(key):
            if self.data.is_expired(key):
                self.data.delete(key)
                logger.debug("[InMemoryDb] Expired key removed: %s", key)
        raise KeyNotFound()

    @db_command(Cmd.QPUSH)
    async def qpush(self, query: Operation) -> Optional[StoreValue]:
        async with self.queue_locks.write(query.key):
            size = self.queues.push(query.key, query.queue_values)
        logger.debug("[InMemoryDb] Queue %s has %d element(s)", query.key, size)
        return None

    @db_command(Cmd.QPOP)
    async def qpop(self, query: Operation) -> Optional[StoreValue]:
        async with self.queue_locks.write(query.key):
            val = self.queues.pop(query.key)
        if val is None:
            raise QueueEmpty()
        return StoreValue(val)
