"""Redis remote store adapters.

Both adapters degrade instead of failing: if Redis cannot be reached at
connect time or during any later call, the adapter switches to disabled
mode for the rest of the process. Reads then miss and writes are no-ops.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import redis
import redis.asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from astrocache.errors import RemoteStoreError

logger = logging.getLogger(__name__)

_UNREACHABLE = (RedisConnectionError, RedisTimeoutError)
_SCAN_BATCH = 100
DEFAULT_PREFIX = "astrovista"
DEFAULT_TIMEOUT = 10.0


def _normalize_url(url: str) -> str:
    """Accept bare ``host:port`` addresses as well as ``redis://`` URLs."""
    return url if "://" in url else f"redis://{url}"


def _glob_escape(text: str) -> str:
    """Escape SCAN MATCH metacharacters so ``text`` only matches itself."""
    escaped = []
    for ch in text:
        if ch == "\\":
            escaped.append(r"[\\]")
        elif ch in "*?[":
            escaped.append(f"[{ch}]")
        else:
            escaped.append(ch)
    return "".join(escaped)


class RedisStore:
    """Sync Redis store with degrade-to-noop behaviour."""

    def __init__(
        self,
        client: Any | None,  # redis.Redis
        *,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._enabled = client is not None
        self._warned = False
        self._state_lock = threading.Lock()

    @classmethod
    def from_url(
        cls,
        url: str | None,
        *,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        prefix: str = DEFAULT_PREFIX,
    ) -> RedisStore:
        """Build a store for ``url``; ``None`` gives a disabled store."""
        if not url:
            return cls(None, prefix=prefix)
        client = redis.Redis.from_url(
            _normalize_url(url),
            password=password,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client, prefix=prefix)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key(self, key: str) -> str:
        """Generate the full Redis key."""
        return f"{self._prefix}:{key}"

    def _disable(self, reason: object) -> None:
        with self._state_lock:
            self._enabled = False
            if self._warned:
                return
            self._warned = True
        logger.warning(
            "Remote cache unavailable (%s); caching is disabled and requests "
            "will be served from the origin store",
            reason,
        )

    def connect(self) -> bool:
        """Ping Redis, entering disabled mode if it does not answer."""
        if self._client is None:
            self._disable("no remote store configured")
            return False
        try:
            self._client.ping()
        except RedisError as exc:
            self._disable(exc)
            return False
        logger.info("Connected to remote cache")
        return True

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Run a client method, converting failures per the degrade policy."""
        if not self._enabled:
            return None
        try:
            return getattr(self._client, method)(*args, **kwargs)
        except _UNREACHABLE as exc:
            self._disable(exc)
            return None
        except RedisError as exc:
            raise RemoteStoreError(f"Redis {method} failed: {exc}") from exc

    def get(self, key: str) -> bytes | None:
        """Get the bytes stored under ``key``."""
        data = self._call("get", self._key(key))
        if data is None:
            return None
        return data if isinstance(data, bytes) else str(data).encode("utf-8")

    def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store ``data`` with a millisecond expiry."""
        self._call("set", self._key(key), data, px=max(ttl_ms, 1))

    def delete(self, key: str) -> None:
        """Delete a single key."""
        self._call("delete", self._key(key))

    def delete_prefix(self, prefix: str) -> None:
        """Delete every key under ``prefix`` using SCAN."""
        cursor = 0
        pattern = f"{_glob_escape(self._key(prefix))}*"
        while self._enabled:
            result = self._call("scan", cursor, match=pattern, count=_SCAN_BATCH)
            if result is None:
                return
            cursor, keys = result
            if keys:
                self._call("delete", *keys)
            if cursor == 0:
                break

    def clear(self) -> None:
        """Delete every key under this store's prefix."""
        self.delete_prefix("")

    def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            self._client.close()


class AsyncRedisStore:
    """Async Redis store with degrade-to-noop behaviour."""

    def __init__(
        self,
        client: Any | None,  # redis.asyncio.Redis
        *,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._enabled = client is not None
        self._warned = False

    @classmethod
    def from_url(
        cls,
        url: str | None,
        *,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        prefix: str = DEFAULT_PREFIX,
    ) -> AsyncRedisStore:
        """Build a store for ``url``; ``None`` gives a disabled store."""
        if not url:
            return cls(None, prefix=prefix)
        client = redis.asyncio.Redis.from_url(
            _normalize_url(url),
            password=password,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client, prefix=prefix)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key(self, key: str) -> str:
        """Generate the full Redis key."""
        return f"{self._prefix}:{key}"

    def _disable(self, reason: object) -> None:
        self._enabled = False
        if self._warned:
            return
        self._warned = True
        logger.warning(
            "Remote cache unavailable (%s); caching is disabled and requests "
            "will be served from the origin store",
            reason,
        )

    async def connect(self) -> bool:
        """Ping Redis, entering disabled mode if it does not answer."""
        if self._client is None:
            self._disable("no remote store configured")
            return False
        try:
            await self._client.ping()
        except RedisError as exc:
            self._disable(exc)
            return False
        logger.info("Connected to remote cache")
        return True

    async def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Run a client method, converting failures per the degrade policy."""
        if not self._enabled:
            return None
        try:
            return await getattr(self._client, method)(*args, **kwargs)
        except _UNREACHABLE as exc:
            self._disable(exc)
            return None
        except RedisError as exc:
            raise RemoteStoreError(f"Redis {method} failed: {exc}") from exc

    async def get(self, key: str) -> bytes | None:
        """Get the bytes stored under ``key``."""
        data = await self._call("get", self._key(key))
        if data is None:
            return None
        return data if isinstance(data, bytes) else str(data).encode("utf-8")

    async def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store ``data`` with a millisecond expiry."""
        await self._call("set", self._key(key), data, px=max(ttl_ms, 1))

    async def delete(self, key: str) -> None:
        """Delete a single key."""
        await self._call("delete", self._key(key))

    async def delete_prefix(self, prefix: str) -> None:
        """Delete every key under ``prefix`` using SCAN."""
        cursor: int = 0
        pattern = f"{_glob_escape(self._key(prefix))}*"
        while self._enabled:
            result = await self._call("scan", cursor, match=pattern, count=_SCAN_BATCH)
            if result is None:
                return
            cursor = result[0]
            keys = result[1]
            if keys:
                await self._call("delete", *keys)
            if cursor == 0:
                break

    async def clear(self) -> None:
        """Delete every key under this store's prefix."""
        await self.delete_prefix("")

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
