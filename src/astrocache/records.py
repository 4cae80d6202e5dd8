"""Read-through caching of origin records, and invalidation after writes."""

from __future__ import annotations

import logging
from typing import Any

from astrocache.facade import CacheFacade
from astrocache.keys import date_range_key, latest_key, record_key, search_key
from astrocache.protocols import OriginStore
from astrocache.types import Filter, MutationResult, RecordTTLs, Sort

logger = logging.getLogger(__name__)

NEWEST_FIRST: Sort = [("date", -1)]
OLDEST_FIRST: Sort = [("date", 1)]


class RecordCache:
    """Cache-first access to origin records.

    Reads go to the cache, then the origin on a miss, and a non-empty
    origin result is written back. :meth:`add` writes the origin first and
    only then drops the keys the new record makes stale.
    """

    def __init__(self, cache: CacheFacade, origin: OriginStore, ttls: RecordTTLs) -> None:
        self._cache = cache
        self._origin = origin
        self._ttls = ttls

    def latest(self) -> dict[str, Any] | None:
        """The most recent record."""
        return self._cache.fetch(
            latest_key(),
            lambda: self._origin.fetch_one({}, sort=NEWEST_FIRST),
            ttl=self._ttls.latest,
        )

    def by_date(self, date: str) -> dict[str, Any] | None:
        """The record published on ``date``."""
        return self._cache.fetch(
            record_key(date),
            lambda: self._origin.fetch_one({"date": date}),
            ttl=self._ttls.record,
        )

    def date_range(self, start: str, end: str) -> list[dict[str, Any]]:
        """Records between ``start`` and ``end`` inclusive, oldest first."""
        return self._cache.fetch(
            date_range_key(start, end),
            lambda: self._origin.fetch_many(
                {"date": {"$gte": start, "$lte": end}}, sort=OLDEST_FIRST
            ),
            ttl=self._ttls.date_range,
            cache_if=bool,
        )

    def search(
        self,
        raw_query: str,
        filter: Filter,
        *,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> dict[str, Any]:
        """One page of search results, keyed by the raw query string."""

        def load() -> dict[str, Any]:
            items = self._origin.fetch_many(
                filter, sort=sort or NEWEST_FIRST, skip=skip, limit=limit
            )
            return {"items": items, "total": self._origin.count(filter)}

        return self._cache.fetch(
            search_key(raw_query),
            load,
            ttl=self._ttls.search,
            cache_if=lambda page: bool(page["items"]),
        )

    def add(self, record: dict[str, Any]) -> str:
        """Insert ``record`` and invalidate the cached views it changes."""
        if not record.get("date"):
            raise ValueError("record has no date")
        return self._cache.mutation(self._insert)(record)

    def _insert(self, record: dict[str, Any]) -> MutationResult[str]:
        record_id = self._origin.insert(record)
        logger.info("Inserted record for %s", record["date"])
        return MutationResult(
            result=record_id,
            invalidates=[latest_key(), record_key(record["date"])],
        )
