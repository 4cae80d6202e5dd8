"""Core types for the astrocache layer."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# "30s", "5m", "2h", "1d", milliseconds, or a timedelta
Duration = str | int | timedelta

# Filters and sort specs handed to the origin store verbatim
Filter = dict[str, Any]
Sort = list[tuple[str, int]]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A stored value with its expiry, owned by a single cache tier."""

    key: str
    value: Any
    expires_at: float  # Clock seconds

    def is_expired(self, now: float) -> bool:
        """Check if the entry's TTL has passed at ``now``."""
        return now > self.expires_at


@dataclass(frozen=True, slots=True)
class RecordTTLs:
    """Per use-case TTLs for cached origin records, in milliseconds."""

    latest: int
    record: int
    date_range: int
    search: int


@dataclass(frozen=True, slots=True)
class MutationResult(Generic[T]):
    """Result of an origin write with the cache keys it makes stale."""

    result: T
    invalidates: list[str]
