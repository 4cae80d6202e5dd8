"""Tests for settings and startup wiring."""

import pytest
from pydantic import ValidationError

from astrocache import (
    MemoryStore,
    MockTranslationProvider,
    RecordCache,
    RedisStore,
    Settings,
    build_services,
)

_ENV_VARS = (
    "REDIS_URL",
    "REDIS_PASSWORD",
    "RATE_LIMIT",
    "RATE_WINDOW",
    "SEARCH_TTL",
    "GOOGLE_TRANSLATE_API_KEY",
    "DEEPL_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Isolate tests from the developer's environment and .env file."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.redis_url is None
        assert settings.rate_limit == 1
        assert settings.rate_window == "60s"
        assert settings.translation_ttl == "30d"
        assert settings.local_max_items == 1000
        assert settings.remote_timeout_seconds == 10.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_URL", "cache.internal:6379")
        monkeypatch.setenv("RATE_LIMIT", "5")
        monkeypatch.setenv("SEARCH_TTL", "2m")
        settings = Settings()
        assert settings.redis_url == "cache.internal:6379"
        assert settings.rate_limit == 5
        assert settings.search_ttl == "2m"

    @pytest.mark.parametrize(("name", "value"), [("RATE_WINDOW", "60"), ("PROVIDER_TIMEOUT", "10")])
    def test_unitless_environment_duration_rejected(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        """Test that a bare number is not silently read as milliseconds."""
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError, match="needs a unit"):
            Settings()

    def test_integer_milliseconds_accepted(self) -> None:
        settings = Settings(rate_window=30_000)
        assert settings.rate_window == 30_000
        assert settings.provider_timeout_seconds == 10.0

    def test_invalid_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(search_ttl="five minutes")

    def test_invalid_limit_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(rate_limit=0)


class TestBuildServices:
    """Tests for build_services."""

    def test_without_redis_starts_disabled(self) -> None:
        """Test that a missing REDIS_URL is degrade mode, not a failure."""
        services = build_services(Settings())
        assert isinstance(services.store, RedisStore)
        assert services.store.enabled is False

        services.cache.set("apod:latest", {"date": "2024-01-15"})
        assert services.cache.get("apod:latest") is None

        services.translation_cache.set("en:pt:hello", "olá")
        assert services.translation_cache.get("en:pt:hello") == "olá"

    def test_memory_store(self) -> None:
        services = build_services(Settings(redis_url="memory://"))
        assert isinstance(services.store, MemoryStore)
        services.cache.set("apod:latest", {"date": "2024-01-15"})
        assert services.cache.get("apod:latest") == {"date": "2024-01-15"}

    def test_rate_limiter_from_settings(self) -> None:
        services = build_services(Settings(rate_limit=2, rate_window="30s"))
        limiter = services.rate_limiter
        assert limiter.limit == 2
        assert limiter.window == 30.0
        assert limiter.retry_after == 30

    def test_default_translator_is_mock(self) -> None:
        services = build_services(Settings())
        assert isinstance(services.translator.provider, MockTranslationProvider)
        assert services.translator.translate("Crab Nebula", "pt") == "Crab Nebula [pt]"

    def test_record_ttls(self) -> None:
        ttls = build_services(Settings()).record_ttls
        assert ttls.latest == 3_600_000
        assert ttls.date_range == 43_200_000
        assert ttls.search == 300_000

    def test_records_need_origin(self) -> None:
        assert build_services(Settings()).records is None

        class Origin:
            def fetch_one(self, filter, sort=None):
                return None

            def fetch_many(self, filter, sort=None, skip=0, limit=0):
                return []

            def insert(self, record):
                return "id"

            def count(self, filter):
                return 0

        services = build_services(Settings(), origin=Origin())
        assert isinstance(services.records, RecordCache)
        services.close()
