"""HTTP fetch primitive with per-request timeout and caller-driven cancellation."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ucpcheck.config.models import NetworkConfig

logger = logging.getLogger(__name__)


class _FetchCancelled(Exception):
    """Raised internally when the caller's cancel event fires mid-request."""


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of one fetch; transport faults are data, not exceptions."""

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None
    etag: str | None = None


class HttpFetcher:
    """Fetch JSON documents over HTTPS with httpx."""

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._transport = transport
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent or NetworkConfig().user_agent,
        }

    async def fetch_json(
        self, url: str, *, timeout_ms: int, cancel_event: asyncio.Event | None = None
    ) -> FetchResult:
        """Fetch and parse a JSON document such as a capability schema."""
        return await self._fetch(url, timeout_ms=timeout_ms, cancel_event=cancel_event, reject_html=False)

    async def fetch_profile(
        self, url: str, *, timeout_ms: int, cancel_event: asyncio.Event | None = None
    ) -> FetchResult:
        """Fetch a profile document, rejecting HTML bodies even on a 2xx status."""
        return await self._fetch(url, timeout_ms=timeout_ms, cancel_event=cancel_event, reject_html=True)

    async def _fetch(
        self,
        url: str,
        *,
        timeout_ms: int,
        cancel_event: asyncio.Event | None,
        reject_html: bool,
    ) -> FetchResult:
        try:
            response = await self._get_bounded(url, timeout_ms, cancel_event)
        except _FetchCancelled:
            logger.warning("Fetch of %s cancelled by caller", url)
            return FetchResult(success=False, error="Request cancelled")
        except (TimeoutError, httpx.TimeoutException):
            logger.warning("Fetch of %s timed out after %dms", url, timeout_ms)
            return FetchResult(success=False, error=f"Request timed out after {timeout_ms}ms")
        except httpx.HTTPError as exc:
            logger.warning("Fetch of %s failed: %s", url, exc)
            return FetchResult(success=False, error=str(exc) or type(exc).__name__)
        except (httpx.InvalidURL, UnicodeError) as exc:
            # httpx raises these while building the request, outside the HTTPError tree
            logger.warning("Fetch of %r rejected: %s", url, exc)
            return FetchResult(success=False, error=f"Invalid URL: {exc}")

        if not response.is_success:
            return FetchResult(
                success=False,
                error=f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        text = response.text
        if reject_html and text.strip().startswith("<"):
            return FetchResult(success=False, error="Response is HTML, not JSON", status_code=response.status_code)
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as exc:
            return FetchResult(success=False, error=f"Invalid JSON: {exc}", status_code=response.status_code)
        return FetchResult(
            success=True,
            data=data,
            status_code=response.status_code,
            etag=response.headers.get("etag"),
        )

    async def _get(self, url: str, timeout_seconds: float) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout_seconds, transport=self._transport, follow_redirects=True
        ) as client:
            return await client.get(url, headers=self._headers)

    async def _get_bounded(
        self, url: str, timeout_ms: int, cancel_event: asyncio.Event | None
    ) -> httpx.Response:
        timeout_seconds = max(timeout_ms, 1) / 1000.0
        if cancel_event is None:
            async with asyncio.timeout(timeout_seconds):
                return await self._get(url, timeout_seconds)

        request = asyncio.create_task(self._get(url, timeout_seconds))
        waiter = asyncio.create_task(cancel_event.wait())
        try:
            async with asyncio.timeout(timeout_seconds):
                done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (waiter, request):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
        if request in done:
            return request.result()
        raise _FetchCancelled()
