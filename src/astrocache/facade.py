"""Cache facade over a remote store.

Values are stored as canonical JSON envelopes carrying their own expiry, so
a read never returns an expired value even if the backend keeps it around.
Every error raised here is a soft failure from the caller's point of view:
log it and go to the origin store.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from astrocache.adapters.base import AsyncRemoteStore, RemoteStore
from astrocache.duration import parse_duration
from astrocache.errors import CacheError, DeserializationError, SerializationError
from astrocache.types import Duration, MutationResult

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

DEFAULT_TTL: Duration = "24h"

_MISSING = object()


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode(value: Any, expires_at: int) -> bytes:
    """Serialize a value and its expiry (epoch ms) to canonical JSON bytes."""
    try:
        text = json.dumps(
            {"value": value, "expires_at": expires_at},
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot serialize value: {exc}") from exc
    return text.encode("utf-8")


def decode(data: bytes) -> tuple[Any, int]:
    """Deserialize bytes written by :func:`encode` into (value, expires_at)."""
    try:
        obj = json.loads(data.decode("utf-8"))
        return obj["value"], int(obj["expires_at"])
    except (UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        raise DeserializationError(f"Cannot deserialize cached value: {exc}") from exc


def convert(value: Any, into: Callable[..., Any] | None) -> Any:
    """Build the caller's destination from a decoded value.

    Dataclass types receive a decoded object as keyword arguments; any
    other callable receives the value itself.
    """
    if into is None:
        return value
    try:
        if isinstance(into, type) and dataclasses.is_dataclass(into) and isinstance(value, dict):
            return into(**value)
        return into(value)
    except (TypeError, ValueError, KeyError) as exc:
        name = getattr(into, "__name__", repr(into))
        raise DeserializationError(f"Cannot convert cached value to {name}: {exc}") from exc


class CacheFacade:
    """Get/set/delete/clear over a sync remote store."""

    def __init__(
        self,
        store: RemoteStore,
        *,
        default_ttl: Duration = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._default_ttl = parse_duration(default_ttl)
        self._clock = clock

    @property
    def store(self) -> RemoteStore:
        return self._store

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _lookup(self, key: str, into: Callable[..., Any] | None) -> Any:
        data = self._store.get(key)
        if data is None:
            return _MISSING
        value, expires_at = decode(data)
        if self._now_ms() > expires_at:
            return _MISSING
        return convert(value, into)

    def get(
        self,
        key: str,
        into: Callable[..., Any] | None = None,
        default: Any = None,
    ) -> Any:
        """Get the value cached under ``key``, or ``default`` on a miss.

        ``into`` converts the decoded JSON into the caller's type.

        Raises:
            DeserializationError: the stored bytes could not be decoded.
            RemoteStoreError: the store rejected the read.
        """
        value = self._lookup(key, into)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Cache ``value`` under ``key`` for ``ttl``.

        Raises:
            SerializationError: nothing was written.
            RemoteStoreError: the store rejected the write.
        """
        ttl_ms = self._default_ttl if ttl is None else parse_duration(ttl)
        data = encode(value, self._now_ms() + ttl_ms)
        self._store.set(key, data, ttl_ms)

    def delete(self, key: str) -> None:
        """Remove ``key``."""
        self._store.delete(key)

    def delete_prefix(self, prefix: str) -> None:
        """Remove every key in the ``prefix`` namespace."""
        self._store.delete_prefix(prefix)

    def clear(self) -> None:
        """Remove every cached value."""
        self._store.clear()

    def fetch(
        self,
        key: str,
        loader: Callable[[], R],
        ttl: Duration | None = None,
        into: Callable[..., Any] | None = None,
        cache_if: Callable[[R], bool] | None = None,
    ) -> R:
        """Read through the cache, calling ``loader`` on a miss.

        Cache failures are logged and never hide the loader's result.
        A loader result of ``None`` is not cached, nor is one ``cache_if``
        rejects.
        """
        try:
            cached = self._lookup(key, into)
        except CacheError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            cached = _MISSING
        if cached is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return cached  # type: ignore[no-any-return]

        logger.debug("Cache miss: %s", key)
        value = loader()
        if value is not None and (cache_if is None or cache_if(value)):
            try:
                self.set(key, value, ttl)
            except CacheError as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)
        return value

    def invalidate(self, *keys: str) -> None:
        """Delete ``keys``, logging failures instead of raising."""
        for key in keys:
            try:
                self._store.delete(key)
            except CacheError as exc:
                logger.warning("Cache invalidation failed for %s: %s", key, exc)

    def mutation(
        self,
        fn: Callable[P, MutationResult[R]],
    ) -> Callable[P, R]:
        """Decorator that runs an origin write, then invalidates its keys.

        The write always completes before invalidation starts; a reader in
        between may still see the old cached value.
        """

        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            outcome = fn(*args, **kwargs)
            self.invalidate(*outcome.invalidates)
            return outcome.result

        return wrapper


class AsyncCacheFacade:
    """Get/set/delete/clear over an async remote store."""

    def __init__(
        self,
        store: AsyncRemoteStore,
        *,
        default_ttl: Duration = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._default_ttl = parse_duration(default_ttl)
        self._clock = clock

    @property
    def store(self) -> AsyncRemoteStore:
        return self._store

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _lookup(self, key: str, into: Callable[..., Any] | None) -> Any:
        data = await self._store.get(key)
        if data is None:
            return _MISSING
        value, expires_at = decode(data)
        if self._now_ms() > expires_at:
            return _MISSING
        return convert(value, into)

    async def get(
        self,
        key: str,
        into: Callable[..., Any] | None = None,
        default: Any = None,
    ) -> Any:
        """Get the value cached under ``key``, or ``default`` on a miss."""
        value = await self._lookup(key, into)
        return default if value is _MISSING else value

    async def set(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Cache ``value`` under ``key`` for ``ttl``."""
        ttl_ms = self._default_ttl if ttl is None else parse_duration(ttl)
        data = encode(value, self._now_ms() + ttl_ms)
        await self._store.set(key, data, ttl_ms)

    async def delete(self, key: str) -> None:
        """Remove ``key``."""
        await self._store.delete(key)

    async def delete_prefix(self, prefix: str) -> None:
        """Remove every key in the ``prefix`` namespace."""
        await self._store.delete_prefix(prefix)

    async def clear(self) -> None:
        """Remove every cached value."""
        await self._store.clear()

    async def fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[R]],
        ttl: Duration | None = None,
        into: Callable[..., Any] | None = None,
        cache_if: Callable[[R], bool] | None = None,
    ) -> R:
        """Read through the cache, awaiting ``loader`` on a miss."""
        try:
            cached = await self._lookup(key, into)
        except CacheError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            cached = _MISSING
        if cached is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return cached  # type: ignore[no-any-return]

        logger.debug("Cache miss: %s", key)
        value = await loader()
        if value is not None and (cache_if is None or cache_if(value)):
            try:
                await self.set(key, value, ttl)
            except CacheError as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)
        return value

    async def invalidate(self, *keys: str) -> None:
        """Delete ``keys``, logging failures instead of raising."""
        for key in keys:
            try:
                await self._store.delete(key)
            except CacheError as exc:
                logger.warning("Cache invalidation failed for %s: %s", key, exc)

    def mutation(
        self,
        fn: Callable[P, Awaitable[MutationResult[R]]],
    ) -> Callable[P, Awaitable[R]]:
        """Decorator that awaits an origin write, then invalidates its keys."""

        @wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            outcome = await fn(*args, **kwargs)
            await self.invalidate(*outcome.invalidates)
            return outcome.result

        return wrapper
