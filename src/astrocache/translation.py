"""Two-tier cache for translated text.

The durable tier is a cache facade under the ``translation:`` namespace and
survives restarts. The local tier is an in-process :class:`LocalCache`.
Reads consult the durable tier first; writes go to both, so either tier
alone can answer later reads.
"""

from __future__ import annotations

import logging

from astrocache.errors import CacheError
from astrocache.facade import AsyncCacheFacade, CacheFacade
from astrocache.keys import TRANSLATION_PREFIX
from astrocache.local import LocalCache
from astrocache.types import Duration

logger = logging.getLogger(__name__)

DEFAULT_TRANSLATION_TTL: Duration = "30d"


def _durable_key(key: str) -> str:
    return f"{TRANSLATION_PREFIX}{key}"


def _as_text(value: object) -> str | None:
    return value if isinstance(value, str) else None


class TranslationCache:
    """Sync translation cache over a durable facade and a local tier."""

    def __init__(
        self,
        durable: CacheFacade | None,
        local: LocalCache | None = None,
        *,
        ttl: Duration = DEFAULT_TRANSLATION_TTL,
    ) -> None:
        self._durable = durable
        self._local = local if local is not None else LocalCache()
        self._ttl = ttl

    @property
    def local(self) -> LocalCache:
        return self._local

    def get(self, key: str) -> str | None:
        """Get a cached translation, durable tier first."""
        if self._durable is not None:
            try:
                text = _as_text(self._durable.get(_durable_key(key)))
            except CacheError as exc:
                logger.warning("Durable translation cache read failed: %s", exc)
            else:
                if text is not None:
                    return text
        return _as_text(self._local.get(key))

    def set(self, key: str, text: str) -> None:
        """Store a translation in both tiers."""
        if self._durable is not None:
            try:
                self._durable.set(_durable_key(key), text, self._ttl)
            except CacheError as exc:
                logger.warning("Durable translation cache write failed: %s", exc)
        self._local.set(key, text)

    def clear(self) -> None:
        """Drop every cached translation from both tiers."""
        self._local.clear()
        if self._durable is not None:
            try:
                self._durable.delete_prefix(TRANSLATION_PREFIX)
            except CacheError as exc:
                logger.warning("Durable translation cache clear failed: %s", exc)


class AsyncTranslationCache:
    """Async translation cache over a durable facade and a local tier."""

    def __init__(
        self,
        durable: AsyncCacheFacade | None,
        local: LocalCache | None = None,
        *,
        ttl: Duration = DEFAULT_TRANSLATION_TTL,
    ) -> None:
        self._durable = durable
        self._local = local if local is not None else LocalCache()
        self._ttl = ttl

    @property
    def local(self) -> LocalCache:
        return self._local

    async def get(self, key: str) -> str | None:
        """Get a cached translation, durable tier first."""
        if self._durable is not None:
            try:
                text = _as_text(await self._durable.get(_durable_key(key)))
            except CacheError as exc:
                logger.warning("Durable translation cache read failed: %s", exc)
            else:
                if text is not None:
                    return text
        return _as_text(self._local.get(key))

    async def set(self, key: str, text: str) -> None:
        """Store a translation in both tiers."""
        if self._durable is not None:
            try:
                await self._durable.set(_durable_key(key), text, self._ttl)
            except CacheError as exc:
                logger.warning("Durable translation cache write failed: %s", exc)
        self._local.set(key, text)

    async def clear(self) -> None:
        """Drop every cached translation from both tiers."""
        self._local.clear()
        if self._durable is not None:
            try:
                await self._durable.delete_prefix(TRANSLATION_PREFIX)
            except CacheError as exc:
                logger.warning("Durable translation cache clear failed: %s", exc)
