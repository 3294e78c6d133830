"""Shared test fixtures for ucpcheck."""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from ucpcheck.validator.cache import SchemaCache

_VALID_PROFILE: dict[str, Any] = {
    "ucp": {
        "version": "2026-01-11",
        "services": {
            "dev.ucp.shopping": {
                "version": "2026-01-11",
                "spec": "https://ucp.dev/specification/overview/",
                "rest": {
                    "schema": "https://ucp.dev/services/shopping/rest.openapi.json",
                    "endpoint": "https://shop.example.com/ucp/v1",
                },
            }
        },
        "capabilities": [
            {
                "name": "dev.ucp.shopping.checkout",
                "version": "2026-01-11",
                "spec": "https://ucp.dev/specification/checkout/",
                "schema": "https://ucp.dev/schemas/shopping/checkout.json",
            }
        ],
    }
}


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 11, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, milliseconds: int = 0, seconds: int = 0) -> None:
        self.now += timedelta(milliseconds=milliseconds, seconds=seconds)


@pytest.fixture
def valid_profile() -> dict[str, Any]:
    """A fresh, fully valid profile document."""
    return copy.deepcopy(_VALID_PROFILE)


@pytest.fixture
def make_profile() -> Callable[..., dict[str, Any]]:
    """Build a valid profile, replacing ``ucp`` sub-keys and root keys as given."""

    def _build(*, ucp: dict[str, Any] | None = None, **root: Any) -> dict[str, Any]:
        document = copy.deepcopy(_VALID_PROFILE)
        document["ucp"].update(copy.deepcopy(ucp or {}))
        document.update(copy.deepcopy(root))
        return document

    return _build


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def schema_cache(fake_clock: FakeClock) -> SchemaCache:
    """Isolated cache so fetch counts never leak between tests."""
    return SchemaCache(clock=fake_clock)
