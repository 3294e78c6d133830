"""Unit tests for the httpx-backed fetch primitive."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from ucpcheck.validator.fetch import HttpFetcher

URL = "https://shop.example.com/.well-known/ucp"


@pytest.mark.asyncio
async def test_fetch_json_success_keeps_etag_and_headers() -> None:
    seen: dict[str, str] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["accept"] = request.headers["accept"]
        seen["user-agent"] = request.headers["user-agent"]
        return httpx.Response(200, json={"$id": "checkout"}, headers={"ETag": '"v1"'})

    fetcher = HttpFetcher(transport=httpx.MockTransport(handler), user_agent="ucpcheck-test/1.0")
    result = await fetcher.fetch_json(URL, timeout_ms=1000)
    assert result.success
    assert result.data == {"$id": "checkout"}
    assert result.etag == '"v1"'
    assert seen == {"accept": "application/json", "user-agent": "ucpcheck-test/1.0"}


@pytest.mark.asyncio
async def test_non_success_status_is_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=1000)
    assert not result.success
    assert result.status_code == 404
    assert result.error is not None and result.error.startswith("HTTP 404")


@pytest.mark.asyncio
async def test_profile_fetch_rejects_html_with_success_status() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="  \n<!doctype html><html></html>")

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_profile(URL, timeout_ms=1000)
    assert not result.success
    assert result.error == "Response is HTML, not JSON"


@pytest.mark.asyncio
async def test_malformed_json_is_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="{not json")

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=1000)
    assert not result.success
    assert result.error is not None and result.error.startswith("Invalid JSON")


@pytest.mark.asyncio
async def test_transport_error_is_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=1000)
    assert not result.success
    assert "connection refused" in (result.error or "")


@pytest.mark.asyncio
async def test_slow_response_times_out() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, json={})

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=20)
    assert not result.success
    assert result.error == "Request timed out after 20ms"


@pytest.mark.asyncio
async def test_httpx_timeout_is_reported_as_timeout() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timeout", request=request)

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=500)
    assert result.error == "Request timed out after 500ms"


@pytest.mark.asyncio
async def test_cancel_event_aborts_pending_fetch() -> None:
    started = asyncio.Event()
    finished = {"value": False}

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(5)
        finished["value"] = True
        return httpx.Response(200, json={})

    cancel = asyncio.Event()
    fetcher = HttpFetcher(transport=httpx.MockTransport(handler))
    pending = asyncio.create_task(fetcher.fetch_json(URL, timeout_ms=10_000, cancel_event=cancel))
    await started.wait()
    cancel.set()
    result = await pending
    assert not result.success
    assert result.error == "Request cancelled"
    assert finished["value"] is False


@pytest.mark.asyncio
async def test_unset_cancel_event_does_not_interfere() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    fetcher = HttpFetcher(transport=httpx.MockTransport(handler))
    result = await fetcher.fetch_json(URL, timeout_ms=1000, cancel_event=asyncio.Event())
    assert result.success
    assert result.data == {"ok": True}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    ["https://ucp.dev/\x00x.json", "https://xn--/x", "https://shop\x00.example.com/.well-known/ucp"],
)
async def test_unbuildable_url_is_failure(url: str) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(url, timeout_ms=1000)
    assert not result.success
    assert result.error


@pytest.mark.asyncio
async def test_deeply_nested_body_is_failure() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="[" * 200_000)

    result = await HttpFetcher(transport=httpx.MockTransport(handler)).fetch_json(URL, timeout_ms=1000)
    assert not result.success
    assert result.error is not None and result.error.startswith("Invalid JSON")
