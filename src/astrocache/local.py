"""Bounded in-process cache with lazy expiry."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from astrocache._rwlock import RWLock
from astrocache.duration import parse_duration
from astrocache.types import CacheEntry, Duration

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 1000
DEFAULT_TTL: Duration = "24h"


class LocalCache:
    """Thread-safe TTL cache bounded to ``max_items`` entries.

    Expired entries are never removed on read. They are dropped when a new
    key arrives at a full cache; if that does not free enough room, a
    quarter of the capacity is evicted oldest-insertion-first. Overwriting
    a key counts as a fresh insertion.
    """

    def __init__(
        self,
        max_items: int = DEFAULT_MAX_ITEMS,
        *,
        default_ttl: Duration = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_items = max_items
        self._default_ttl = parse_duration(default_ttl)
        self._clock = clock
        self._lock = RWLock()

    @property
    def max_items(self) -> int:
        return self._max_items

    def get(self, key: str, default: Any = None) -> Any:
        """Get a live value, or ``default`` if absent or expired."""
        with self._lock.read():
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._clock()):
                return default
            return entry.value

    def set(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` (default TTL if omitted)."""
        ttl_ms = self._default_ttl if ttl is None else parse_duration(ttl)
        with self._lock.write():
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._max_items:
                self._cleanup_locked(now)
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(
                key=key, value=value, expires_at=now + ttl_ms / 1000
            )

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        with self._lock.write():
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet removed."""
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and not entry.is_expired(self._clock())

    def _cleanup_locked(self, now: float) -> None:
        """Make room for one new key. Caller holds the write lock."""
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

        evicted = 0
        if len(self._entries) >= self._max_items:
            to_remove = max(1, self._max_items // 4)
            while evicted < to_remove and self._entries:
                self._entries.popitem(last=False)
                evicted += 1

        logger.debug(
            "Local cache cleanup: %d expired, %d evicted, %d remaining",
            len(expired),
            evicted,
            len(self._entries),
        )
