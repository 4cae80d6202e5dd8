"""Interfaces of the collaborators this layer talks to."""

from typing import Any, Protocol, runtime_checkable

from astrocache.types import Filter, Sort


@runtime_checkable
class OriginStore(Protocol):
    """Document store holding the authoritative records.

    Implementations bound every call with a timeout and raise
    :class:`~astrocache.errors.OriginError` on failure.
    """

    def fetch_one(self, filter: Filter, sort: Sort | None = None) -> dict[str, Any] | None:
        """Fetch the first record matching ``filter``, or ``None``."""
        ...

    def fetch_many(
        self,
        filter: Filter,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """Fetch matching records; ``limit=0`` means no limit."""
        ...

    def insert(self, record: dict[str, Any]) -> str:
        """Insert a record and return its id."""
        ...

    def count(self, filter: Filter) -> int:
        """Count matching records."""
        ...


@runtime_checkable
class TranslationProvider(Protocol):
    """External machine-translation service."""

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """Translate ``text``, raising ``TranslationError`` on failure."""
        ...
