"""Remote store adapters for astrocache."""

from astrocache.adapters.base import AsyncRemoteStore, RemoteStore
from astrocache.adapters.memory import AsyncMemoryStore, MemoryStore
from astrocache.adapters.redis import AsyncRedisStore, RedisStore

__all__ = [
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "AsyncRemoteStore",
    "MemoryStore",
    "RedisStore",
    "RemoteStore",
]
