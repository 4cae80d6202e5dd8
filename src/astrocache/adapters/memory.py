"""In-memory remote store, for development and tests."""

import asyncio
import threading
import time
from collections.abc import Callable


class MemoryStore:
    """Sync in-process stand-in for the remote tier.

    Stores its own copy of every value and honours TTLs on read.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._data: dict[str, tuple[bytes, float]] = {}
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return True

    def connect(self) -> bool:
        return True

    def get(self, key: str) -> bytes | None:
        """Get live bytes for ``key``, dropping them if expired."""
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            data, expires_at = item
            if self._clock() > expires_at:
                del self._data[key]
                return None
            return data

    def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store a copy of ``data``."""
        with self._lock:
            self._data[key] = (bytes(data), self._clock() + ttl_ms / 1000)

    def delete(self, key: str) -> None:
        """Delete ``key``."""
        with self._lock:
            self._data.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``."""
        with self._lock:
            for key in [k for k in self._data if k.startswith(prefix)]:
                del self._data[key]

    def clear(self) -> None:
        """Delete everything."""
        with self._lock:
            self._data.clear()

    def close(self) -> None:
        """No-op for memory."""
        pass


class AsyncMemoryStore:
    """Async in-process stand-in for the remote tier."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._data: dict[str, tuple[bytes, float]] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return True

    async def connect(self) -> bool:
        return True

    async def get(self, key: str) -> bytes | None:
        """Get live bytes for ``key``, dropping them if expired."""
        async with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            data, expires_at = item
            if self._clock() > expires_at:
                del self._data[key]
                return None
            return data

    async def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store a copy of ``data``."""
        async with self._lock:
            self._data[key] = (bytes(data), self._clock() + ttl_ms / 1000)

    async def delete(self, key: str) -> None:
        """Delete ``key``."""
        async with self._lock:
            self._data.pop(key, None)

    async def delete_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``."""
        async with self._lock:
            for key in [k for k in self._data if k.startswith(prefix)]:
                del self._data[key]

    async def clear(self) -> None:
        """Delete everything."""
        async with self._lock:
            self._data.clear()

    async def close(self) -> None:
        """No-op for memory."""
        pass
