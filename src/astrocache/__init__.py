"""astrocache - caching and admission control for the astronomy picture service."""

# Remote stores
from astrocache.adapters import (
    AsyncMemoryStore,
    AsyncRedisStore,
    AsyncRemoteStore,
    MemoryStore,
    RedisStore,
    RemoteStore,
)

# Configuration
from astrocache.config import Settings

# Duration parsing
from astrocache.duration import parse_duration

# Errors
from astrocache.errors import (
    AstroCacheError,
    CacheError,
    DeserializationError,
    OriginError,
    RateLimitExceeded,
    RemoteStoreError,
    SerializationError,
    TranslationError,
)

# Caches
from astrocache.facade import AsyncCacheFacade, CacheFacade
from astrocache.keys import translation_key
from astrocache.local import LocalCache

# Admission control and wiring
from astrocache.ratelimit import RateLimiter, rate_limited
from astrocache.records import RecordCache
from astrocache.services import Services, build_services
from astrocache.translation import AsyncTranslationCache, TranslationCache
from astrocache.translator import (
    DeepLProvider,
    GoogleTranslateProvider,
    MockTranslationProvider,
    Translator,
)

# Core types
from astrocache.types import CacheEntry, Duration, MutationResult, RecordTTLs

__version__ = "0.1.0"

__all__ = [
    "AstroCacheError",
    "AsyncCacheFacade",
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "AsyncRemoteStore",
    "AsyncTranslationCache",
    "CacheEntry",
    "CacheError",
    "CacheFacade",
    "DeepLProvider",
    "DeserializationError",
    "Duration",
    "GoogleTranslateProvider",
    "LocalCache",
    "MemoryStore",
    "MockTranslationProvider",
    "MutationResult",
    "OriginError",
    "RateLimitExceeded",
    "RateLimiter",
    "RecordCache",
    "RecordTTLs",
    "RedisStore",
    "RemoteStore",
    "RemoteStoreError",
    "SerializationError",
    "Services",
    "Settings",
    "TranslationCache",
    "TranslationError",
    "Translator",
    "build_services",
    "parse_duration",
    "rate_limited",
    "translation_key",
]
