"""Settings for the caching and admission-control layer.

Values come from the environment (or a ``.env`` file). A missing
``REDIS_URL`` is not an error: the remote tier simply starts disabled.
Duration variables need a unit (``60s``, ``5m``); a bare number is
rejected rather than read as milliseconds. Integers passed in code are
milliseconds.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from astrocache.duration import parse_duration, to_seconds

_DURATION_FIELDS = (
    "remote_timeout",
    "cache_ttl",
    "local_ttl",
    "latest_ttl",
    "record_ttl",
    "date_range_ttl",
    "search_ttl",
    "translation_ttl",
    "rate_window",
    "provider_timeout",
)


class Settings(BaseSettings):
    """Environment-driven configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote tier; "memory://" selects the in-process stand-in
    redis_url: str | None = None
    redis_password: str | None = None
    redis_prefix: str = "astrovista"
    remote_timeout: str | int = "10s"

    # Local tier
    local_max_items: int = 1000
    local_ttl: str | int = "24h"

    # Per use-case TTLs; cache_ttl applies when a caller gives none
    cache_ttl: str | int = "24h"
    latest_ttl: str | int = "1h"
    record_ttl: str | int = "30d"
    date_range_ttl: str | int = "12h"
    search_ttl: str | int = "5m"
    translation_ttl: str | int = "30d"

    # Write endpoint admission
    rate_limit: int = 1
    rate_window: str | int = "60s"

    # Translation providers
    provider_timeout: str | int = "10s"
    google_translate_api_key: str | None = None
    deepl_api_key: str | None = None

    @field_validator(*_DURATION_FIELDS, mode="after")
    @classmethod
    def _check_duration(cls, value: str | int) -> str | int:
        # RATE_WINDOW=60 would otherwise mean 60 ms
        if isinstance(value, str) and value.strip().isdigit():
            raise ValueError(f"duration {value!r} needs a unit, e.g. '{value.strip()}s'")
        parse_duration(value)
        return value

    @field_validator("local_max_items", "rate_limit")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def remote_timeout_seconds(self) -> float:
        return to_seconds(self.remote_timeout)

    @property
    def provider_timeout_seconds(self) -> float:
        return to_seconds(self.provider_timeout)
