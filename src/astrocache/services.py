"""Startup wiring: build every cache and limiter instance once."""

from __future__ import annotations

from dataclasses import dataclass

from astrocache.adapters.base import RemoteStore
from astrocache.adapters.memory import MemoryStore
from astrocache.adapters.redis import RedisStore
from astrocache.config import Settings
from astrocache.duration import parse_duration
from astrocache.facade import CacheFacade
from astrocache.local import LocalCache
from astrocache.protocols import OriginStore
from astrocache.ratelimit import RateLimiter
from astrocache.records import RecordCache
from astrocache.translation import TranslationCache
from astrocache.translator import Translator, provider_from_settings
from astrocache.types import RecordTTLs

MEMORY_URL = "memory://"


@dataclass
class Services:
    """Shared instances handed to request handlers and middleware."""

    store: RemoteStore
    cache: CacheFacade
    translation_cache: TranslationCache
    translator: Translator
    rate_limiter: RateLimiter
    record_ttls: RecordTTLs
    records: RecordCache | None = None

    def close(self) -> None:
        """Release network resources."""
        self.translator.close()
        self.store.close()


def build_store(settings: Settings) -> RemoteStore:
    """Remote tier for ``settings``, already connected or disabled."""
    store: RemoteStore
    if settings.redis_url == MEMORY_URL:
        store = MemoryStore()
    else:
        store = RedisStore.from_url(
            settings.redis_url,
            password=settings.redis_password,
            timeout=settings.remote_timeout_seconds,
            prefix=settings.redis_prefix,
        )
    store.connect()
    return store


def build_services(
    settings: Settings | None = None,
    *,
    origin: OriginStore | None = None,
) -> Services:
    """Construct the cache, translation and rate-limit services."""
    settings = settings or Settings()
    store = build_store(settings)
    cache = CacheFacade(store, default_ttl=settings.cache_ttl)
    translation_cache = TranslationCache(
        cache,
        LocalCache(settings.local_max_items, default_ttl=settings.local_ttl),
        ttl=settings.translation_ttl,
    )
    ttls = RecordTTLs(
        latest=parse_duration(settings.latest_ttl),
        record=parse_duration(settings.record_ttl),
        date_range=parse_duration(settings.date_range_ttl),
        search=parse_duration(settings.search_ttl),
    )
    return Services(
        store=store,
        cache=cache,
        translation_cache=translation_cache,
        translator=Translator(provider_from_settings(settings), translation_cache),
        rate_limiter=RateLimiter(settings.rate_limit, settings.rate_window),
        record_ttls=ttls,
        records=RecordCache(cache, origin, ttls) if origin is not None else None,
    )
