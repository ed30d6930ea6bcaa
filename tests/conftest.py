from __future__ import annotations

import pytest
import pytest_asyncio

from inmemdb.config import EngineConfig
from inmemdb.database import InMemoryDb
from inmemdb.router import Dispatcher


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def store(clock: FakeClock) -> InMemoryDb:
    return InMemoryDb(clock=clock)


@pytest_asyncio.fixture
async def db(store: InMemoryDb) -> Dispatcher:
    return Dispatcher(store, EngineConfig())
