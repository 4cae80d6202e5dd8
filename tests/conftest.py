"""Shared pytest fixtures."""

from __future__ import annotations

import fnmatch
from typing import Any

import pytest
import redis

from astrocache import AsyncMemoryStore, CacheFacade, LocalCache, MemoryStore


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Just enough of ``redis.Redis`` for the store adapter.

    ``down`` makes every call raise a connection error; ``broken`` makes
    every call raise a server-side error.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}
        self.down = False
        self.broken = False
        self.calls: list[str] = []
        self.closed = False

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.down:
            raise redis.ConnectionError("Connection refused")
        if self.broken:
            raise redis.ResponseError("WRONGTYPE")

    def ping(self) -> bool:
        self._check("ping")
        return True

    def get(self, key: str) -> bytes | None:
        self._check("get")
        return self.data.get(key)

    def set(self, key: str, value: bytes, px: int | None = None) -> bool:
        self._check("set")
        self.data[key] = value
        if px is not None:
            self.ttls[key] = px
        return True

    def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def scan(self, cursor: int, match: str = "*", count: int = 10) -> tuple[int, list[str]]:
        self._check("scan")
        return 0, [key for key in self.data if fnmatch.fnmatchcase(key, match)]

    def close(self) -> None:
        self.closed = True


class AsyncFakeRedis:
    """Just enough of ``redis.asyncio.Redis`` for the async store adapter."""

    def __init__(self) -> None:
        self._sync = FakeRedis()

    @property
    def data(self) -> dict[str, bytes]:
        return self._sync.data

    @property
    def down(self) -> bool:
        return self._sync.down

    @down.setter
    def down(self, value: bool) -> None:
        self._sync.down = value

    @property
    def broken(self) -> bool:
        return self._sync.broken

    @broken.setter
    def broken(self, value: bool) -> None:
        self._sync.broken = value

    async def ping(self) -> bool:
        return self._sync.ping()

    async def get(self, key: str) -> bytes | None:
        return self._sync.get(key)

    async def set(self, key: str, value: bytes, px: int | None = None) -> bool:
        return self._sync.set(key, value, px=px)

    async def delete(self, *keys: str) -> int:
        return self._sync.delete(*keys)

    async def scan(self, cursor: int, match: str = "*", count: int = 10) -> Any:
        return self._sync.scan(cursor, match=match, count=count)

    async def aclose(self) -> None:
        self._sync.close()


@pytest.fixture
def clock() -> FakeClock:
    """A fake monotonic clock starting at zero."""
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeClock:
    """A fake wall clock starting at a plausible epoch time."""
    return FakeClock(1_700_000_000.0)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def async_fake_redis() -> AsyncFakeRedis:
    return AsyncFakeRedis()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Create a fresh MemoryStore for each test."""
    return MemoryStore()


@pytest.fixture
def async_memory_store() -> AsyncMemoryStore:
    """Create a fresh AsyncMemoryStore for each test."""
    return AsyncMemoryStore()


@pytest.fixture
def facade(memory_store: MemoryStore, wall_clock: FakeClock) -> CacheFacade:
    """A cache facade over a memory store, driven by a fake clock."""
    return CacheFacade(memory_store, clock=wall_clock)


@pytest.fixture
def local_cache(clock: FakeClock) -> LocalCache:
    """A small LocalCache driven by a fake clock."""
    return LocalCache(max_items=8, clock=clock)
