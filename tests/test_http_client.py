"""Tests for the retrying direct fetcher and the proxy fetcher factory."""

import httpx
import pytest

from conftest import mock_client
from product_scraper.ingest.base import FetchTier
from product_scraper.ingest.http_client import (
    ProxyFetcher,
    RetryingFetcher,
    backoff_delay,
    is_transient_status,
)

URL = "https://shop.example.com/p/blue-crew-tee"


def sequence_handler(*responses):
    """Serve the given responses (or raise the given exceptions) in order."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        item = responses[min(len(calls), len(responses) - 1)]
        calls.append(request)
        if isinstance(item, Exception):
            raise item
        return item

    handler.calls = calls
    return handler


def test_backoff_delay_doubles():
    assert backoff_delay(1) == 0.5
    assert backoff_delay(2) == 1.0
    assert backoff_delay(3) == 2.0


@pytest.mark.parametrize("status,transient", [(500, True), (503, True), (429, True), (404, False), (403, False)])
def test_is_transient_status(status, transient):
    assert is_transient_status(status) is transient


@pytest.mark.asyncio
async def test_success_on_first_attempt(sleep_recorder):
    handler = sequence_handler(httpx.Response(200, text="<h1>Tee</h1>"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert result.status_code == 200
    assert result.blocked_body is None
    assert result.last_error is None
    assert len(handler.calls) == 1
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_server_errors_retry_with_backoff(sleep_recorder):
    handler = sequence_handler(httpx.Response(500, text="oops"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, max_attempts=3, sleep=sleep_recorder).try_fetch(URL)

    assert len(handler.calls) == 3
    assert sleep_recorder.delays == [0.5, 1.0]
    assert result.status_code == 500
    assert result.last_error.startswith("Remote returned 500")
    assert result.attempts == 3


@pytest.mark.asyncio
async def test_transient_then_success(sleep_recorder):
    handler = sequence_handler(
        httpx.Response(429, text="slow down"),
        httpx.Response(200, text="<h1>Tee</h1>"),
    )
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert result.status_code == 200
    assert sleep_recorder.delays == [0.5]


@pytest.mark.asyncio
async def test_transport_errors_leave_no_response(sleep_recorder):
    handler = sequence_handler(httpx.ConnectError("connection refused"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, max_attempts=3, sleep=sleep_recorder).try_fetch(URL)

    assert result.response is None
    assert "ConnectError" in result.last_error
    assert sleep_recorder.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_403_stops_immediately(sleep_recorder):
    handler = sequence_handler(httpx.Response(403, text="Forbidden"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert len(handler.calls) == 1
    assert result.blocked_body == "Forbidden"
    assert result.blocked_tier is FetchTier.DIRECT
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_block_body_on_200_stops_immediately(sleep_recorder):
    handler = sequence_handler(httpx.Response(200, text="<title>Just a moment... Cloudflare</title>"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert len(handler.calls) == 1
    assert result.blocked_body is not None
    assert result.status_code == 200


@pytest.mark.asyncio
async def test_404_is_not_retried(sleep_recorder):
    handler = sequence_handler(httpx.Response(404, text="Not here"))
    async with mock_client(handler) as client:
        result = await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert len(handler.calls) == 1
    assert result.status_code == 404
    assert result.blocked_body is None
    assert sleep_recorder.delays == []


@pytest.mark.asyncio
async def test_each_attempt_rotates_user_agent_header(sleep_recorder):
    handler = sequence_handler(httpx.Response(503), httpx.Response(503), httpx.Response(200, text="ok"))
    async with mock_client(handler) as client:
        await RetryingFetcher(client, sleep=sleep_recorder).try_fetch(URL)

    assert all(request.headers.get("User-Agent") for request in handler.calls)
    assert all("text/html" in request.headers["Accept"] for request in handler.calls)


def test_proxy_fetcher_malformed_url_is_unavailable():
    assert ProxyFetcher.create("ftp://proxy.example.com:21") is None


@pytest.mark.asyncio
async def test_proxy_fetcher_tier_and_close():
    fetcher = ProxyFetcher(mock_client(sequence_handler(httpx.Response(200, text="ok"))))
    async with fetcher:
        result = await fetcher.try_fetch(URL)
    assert result.tier is FetchTier.PROXY
    assert fetcher.client.is_closed
