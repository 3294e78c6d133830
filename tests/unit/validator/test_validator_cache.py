"""Unit tests for the schema cache."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from ucpcheck.validator.cache import SchemaCache, clear_schema_cache, get_default_schema_cache

URL = "https://ucp.dev/schemas/shopping/checkout.json"


def test_put_then_get_returns_entry(schema_cache: SchemaCache, fake_clock: Any) -> None:
    entry = schema_cache.put(URL, {"$id": URL}, ttl_ms=1000, etag='"abc"')
    assert entry.fetched_at == fake_clock.now
    assert entry.expires_at == fake_clock.now + timedelta(milliseconds=1000)
    assert schema_cache.get(URL) is entry
    assert entry.etag == '"abc"'


def test_expired_entry_is_dropped_on_lookup(schema_cache: SchemaCache, fake_clock: Any) -> None:
    schema_cache.put(URL, {"$id": URL}, ttl_ms=1000)
    fake_clock.advance(milliseconds=999)
    assert schema_cache.get(URL) is not None
    fake_clock.advance(milliseconds=1)
    assert schema_cache.get(URL) is None
    assert URL not in schema_cache
    assert len(schema_cache) == 0


def test_expiry_is_lazy(schema_cache: SchemaCache, fake_clock: Any) -> None:
    schema_cache.put(URL, {}, ttl_ms=10)
    fake_clock.advance(seconds=60)
    assert URL in schema_cache
    schema_cache.get(URL)
    assert URL not in schema_cache


def test_put_overwrites_whole_entry(schema_cache: SchemaCache) -> None:
    first = schema_cache.put(URL, {"version": "2025-01-01"}, ttl_ms=1000, etag="v1")
    second = schema_cache.put(URL, {"version": "2026-01-11"}, ttl_ms=1000)
    current = schema_cache.get(URL)
    assert current is second
    assert current.etag is None
    assert first.body == {"version": "2025-01-01"}


def test_clear_empties_cache(schema_cache: SchemaCache) -> None:
    schema_cache.put(URL, {}, ttl_ms=1000)
    schema_cache.put(URL + "?v=2", {}, ttl_ms=1000)
    schema_cache.clear()
    assert len(schema_cache) == 0


def test_default_cache_is_shared_and_clearable() -> None:
    cache = get_default_schema_cache()
    assert get_default_schema_cache() is cache
    cache.put(URL, {}, ttl_ms=60_000)
    clear_schema_cache()
    assert URL not in cache
