"""Tests for the two-tier translation cache."""

import pytest

from astrocache import (
    AsyncCacheFacade,
    AsyncMemoryStore,
    AsyncRedisStore,
    AsyncTranslationCache,
    CacheFacade,
    LocalCache,
    MemoryStore,
    RedisStore,
    TranslationCache,
    translation_key,
)


@pytest.fixture
def translation_cache(facade: CacheFacade, local_cache: LocalCache) -> TranslationCache:
    return TranslationCache(facade, local_cache)


class TestTranslationCache:
    """Tests for the sync translation cache."""

    def test_round_trip(self, translation_cache: TranslationCache) -> None:
        key = translation_key("hello", "en", "pt")
        translation_cache.set(key, "olá")
        assert translation_cache.get(key) == "olá"

    def test_miss(self, translation_cache: TranslationCache) -> None:
        assert translation_cache.get("en:pt:unknown") is None

    def test_set_writes_both_tiers(
        self,
        translation_cache: TranslationCache,
        facade: CacheFacade,
        local_cache: LocalCache,
    ) -> None:
        """Test that either tier alone can answer after a set."""
        translation_cache.set("en:pt:hello", "olá")
        assert facade.get("translation:en:pt:hello") == "olá"
        assert local_cache.get("en:pt:hello") == "olá"

    def test_durable_tier_wins(
        self,
        translation_cache: TranslationCache,
        facade: CacheFacade,
        local_cache: LocalCache,
    ) -> None:
        """Test that the durable tier is read first."""
        local_cache.set("en:pt:hello", "oi")
        facade.set("translation:en:pt:hello", "olá")
        assert translation_cache.get("en:pt:hello") == "olá"

    def test_durable_hit_not_copied_to_local(
        self,
        translation_cache: TranslationCache,
        facade: CacheFacade,
        local_cache: LocalCache,
    ) -> None:
        facade.set("translation:en:pt:hello", "olá")
        translation_cache.get("en:pt:hello")
        assert local_cache.get("en:pt:hello") is None

    def test_falls_back_to_local(
        self,
        translation_cache: TranslationCache,
        facade: CacheFacade,
    ) -> None:
        """Test that a durable miss is answered by the local tier."""
        translation_cache.set("en:pt:hello", "olá")
        facade.delete("translation:en:pt:hello")
        assert translation_cache.get("en:pt:hello") == "olá"

    def test_unavailable_durable_tier(self, fake_redis, local_cache: LocalCache) -> None:
        """Test that the local tier serves reads when Redis is down."""
        fake_redis.down = True
        store = RedisStore(fake_redis)
        store.connect()
        cache = TranslationCache(CacheFacade(store), local_cache)

        cache.set("en:pt:hello", "olá")
        assert cache.get("en:pt:hello") == "olá"

    def test_failing_durable_tier(self, fake_redis, local_cache: LocalCache, caplog) -> None:
        """Test that durable-tier errors never block the local tier."""
        cache = TranslationCache(CacheFacade(RedisStore(fake_redis)), local_cache)
        fake_redis.broken = True

        cache.set("en:pt:hello", "olá")
        assert cache.get("en:pt:hello") == "olá"
        assert "Durable translation cache write failed" in caplog.text
        assert "Durable translation cache read failed" in caplog.text

    def test_without_durable_tier(self, local_cache: LocalCache) -> None:
        cache = TranslationCache(None, local_cache)
        cache.set("en:pt:hello", "olá")
        assert cache.get("en:pt:hello") == "olá"

    def test_durable_ttl(self, memory_store: MemoryStore, wall_clock, local_cache: LocalCache) -> None:
        """Test that the durable copy expires after the translation TTL."""
        facade = CacheFacade(memory_store, clock=wall_clock)
        cache = TranslationCache(facade, local_cache, ttl="30d")
        cache.set("en:pt:hello", "olá")
        wall_clock.advance(29 * 86400)
        assert facade.get("translation:en:pt:hello") == "olá"
        wall_clock.advance(2 * 86400)
        assert facade.get("translation:en:pt:hello") is None

    def test_clear(
        self,
        translation_cache: TranslationCache,
        facade: CacheFacade,
    ) -> None:
        """Test that clear empties both tiers but only the translation namespace."""
        facade.set("apod:latest", {"date": "2024-01-15"})
        translation_cache.set("en:pt:hello", "olá")
        translation_cache.clear()
        assert translation_cache.get("en:pt:hello") is None
        assert facade.get("apod:latest") == {"date": "2024-01-15"}

    def test_default_local_tier(self, facade: CacheFacade) -> None:
        cache = TranslationCache(facade)
        assert cache.local.max_items == 1000


class TestAsyncTranslationCache:
    """Tests for the async translation cache."""

    @pytest.mark.asyncio
    async def test_round_trip(self, local_cache: LocalCache) -> None:
        cache = AsyncTranslationCache(AsyncCacheFacade(AsyncMemoryStore()), local_cache)
        await cache.set("en:pt:hello", "olá")
        assert await cache.get("en:pt:hello") == "olá"
        assert local_cache.get("en:pt:hello") == "olá"

    @pytest.mark.asyncio
    async def test_unavailable_durable_tier(self, async_fake_redis, local_cache: LocalCache) -> None:
        async_fake_redis.down = True
        cache = AsyncTranslationCache(
            AsyncCacheFacade(AsyncRedisStore(async_fake_redis)), local_cache
        )
        await cache.set("en:pt:hello", "olá")
        assert await cache.get("en:pt:hello") == "olá"

    @pytest.mark.asyncio
    async def test_clear(self, local_cache: LocalCache) -> None:
        durable = AsyncCacheFacade(AsyncMemoryStore())
        cache = AsyncTranslationCache(durable, local_cache)
        await cache.set("en:pt:hello", "olá")
        await cache.clear()
        assert await cache.get("en:pt:hello") is None
