"""Time-expiring cache of fetched capability schemas.

Entries are frozen and replaced wholesale, and expiry is checked lazily on
lookup, so concurrent validations may share one cache without a lock: the
worst race is a duplicate fetch, never a torn read.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class SchemaCacheEntry:
    """One cached schema document."""

    url: str
    body: dict[str, Any]
    fetched_at: datetime
    expires_at: datetime
    etag: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SchemaCache:
    """Process-wide or per-test store of schema bodies keyed by URL."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now
        self._entries: dict[str, SchemaCacheEntry] = {}

    def get(self, url: str) -> SchemaCacheEntry | None:
        """Return a live entry, dropping it first if it has expired."""
        entry = self._entries.get(url)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug("Schema cache entry expired: %s", url)
            self._entries.pop(url, None)
            return None
        return entry

    def put(self, url: str, body: dict[str, Any], *, ttl_ms: int, etag: str | None = None) -> SchemaCacheEntry:
        """Store ``body`` for ``url`` with ``expires_at = now + ttl_ms``."""
        now = self._clock()
        entry = SchemaCacheEntry(
            url=url,
            body=body,
            fetched_at=now,
            expires_at=now + timedelta(milliseconds=ttl_ms),
            etag=etag,
        )
        self._entries[url] = entry
        return entry

    def clear(self) -> None:
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries


_default_cache = SchemaCache()


def get_default_schema_cache() -> SchemaCache:
    """Return the cache shared by module-level validation helpers."""
    return _default_cache


def clear_schema_cache() -> None:
    """Drop every entry from the shared cache."""
    _default_cache.clear()
