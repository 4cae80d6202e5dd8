"""Exception hierarchy for astrocache."""

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


class AstroCacheError(Exception):
    """Base class for every error raised by astrocache."""


class CacheError(AstroCacheError):
    """A cache operation failed. Callers treat these as soft failures."""


class SerializationError(CacheError):
    """A value could not be encoded for storage; nothing was written."""


class DeserializationError(CacheError):
    """Stored bytes could not be decoded into the requested destination."""


class RemoteStoreError(CacheError):
    """The remote store rejected an operation while reachable."""


class OriginError(AstroCacheError):
    """The origin record store failed or timed out."""


class TranslationError(AstroCacheError):
    """A translation provider failed or returned no translation."""


class RateLimitExceeded(AstroCacheError):
    """A client went over its request budget for the current window."""

    status_code = 429

    def __init__(self, retry_after: int, message: str = RATE_LIMIT_MESSAGE) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Body for the client-visible throttling response."""
        return {"error": self.message}

    def headers(self) -> dict[str, str]:
        """Headers for the client-visible throttling response."""
        return {"Retry-After": str(self.retry_after)}
