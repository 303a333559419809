"""Tests for scraping provider adapters."""

import httpx
import pytest

from conftest import RequestLog, mock_client
from product_scraper.ingest.providers import (
    ProviderAdapter,
    get_provider,
    supports_structured_product,
)

TARGET = "https://shop.example.com/p/blue-crew-tee"


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text="<h1>Blue Crew Tee</h1>")


@pytest.mark.asyncio
async def test_scrapingbee_params():
    log = RequestLog(ok_handler)
    async with mock_client(log) as client:
        resp = await ProviderAdapter(client).fetch(TARGET, "scrapingbee", "KEY", render=True)

    assert resp.status_code == 200
    request = log.requests[0]
    assert str(request.url).startswith("https://app.scrapingbee.com/api/v1/")
    params = request.url.params
    assert params["api_key"] == "KEY"
    assert params["url"] == TARGET
    assert params["render_js"] == "true"
    assert params["block_ads"] == "true"
    assert params["premium_proxy"] == "true"
    assert params["country_code"] == "us"
    assert request.headers["User-Agent"]


@pytest.mark.asyncio
async def test_scraperapi_params_render_only_when_requested():
    log = RequestLog(ok_handler)
    async with mock_client(log) as client:
        adapter = ProviderAdapter(client)
        await adapter.fetch(TARGET, "ScraperAPI", "KEY", render=True)
        await adapter.fetch(TARGET, "scraperapi", "KEY", render=False)

    rendered, plain = log.requests
    assert rendered.url.host == "api.scraperapi.com"
    assert rendered.url.params["render"] == "true"
    assert "render" not in plain.url.params
    assert plain.url.params["url"] == TARGET


@pytest.mark.asyncio
async def test_render_defaults_to_configured_value():
    log = RequestLog(ok_handler)
    async with mock_client(log) as client:
        await ProviderAdapter(client, default_render=False).fetch(TARGET, "scrapingbee", "KEY")
    assert log.requests[0].url.params["render_js"] == "false"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "provider,api_key",
    [("unknown", "KEY"), (None, "KEY"), ("scrapingbee", None), ("scrapingbee", "")],
)
async def test_missing_or_unknown_provider_makes_no_call(provider, api_key):
    log = RequestLog(ok_handler)
    async with mock_client(log) as client:
        resp = await ProviderAdapter(client).fetch(TARGET, provider, api_key)
    assert resp is None
    assert log.requests == []


@pytest.mark.asyncio
async def test_transport_error_returns_none():
    def handler(request):
        raise httpx.ReadTimeout("timed out")

    async with mock_client(handler) as client:
        resp = await ProviderAdapter(client).fetch(TARGET, "scrapingbee", "KEY")
    assert resp is None


@pytest.mark.asyncio
async def test_non_ok_response_is_returned_to_caller():
    async with mock_client(lambda request: httpx.Response(401, text="bad key")) as client:
        resp = await ProviderAdapter(client).fetch(TARGET, "scrapingbee", "KEY")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_fetch_amazon_product():
    log = RequestLog(lambda request: httpx.Response(200, json={"title": "Echo Dot"}))
    async with mock_client(log) as client:
        data = await ProviderAdapter(client).fetch_amazon_product("B08N5WRWNW", "KEY")

    assert data == {"title": "Echo Dot"}
    request = log.requests[0]
    assert request.url.path == "/api/v1/amazon/product"
    assert request.url.params["query"] == "B08N5WRWNW"
    assert request.url.params["domain"] == "com"
    assert request.url.params["api_key"] == "KEY"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="error"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["not", "a", "dict"]),
    ],
)
async def test_fetch_amazon_product_failures(response):
    async with mock_client(lambda request: response) as client:
        assert await ProviderAdapter(client).fetch_amazon_product("B08N5WRWNW", "KEY") is None


def test_provider_lookup():
    assert get_provider("ScrapingBee").name == "scrapingbee"
    assert get_provider("nope") is None
    assert supports_structured_product("scrapingbee") is True
    assert supports_structured_product("scraperapi") is False
    assert supports_structured_product(None) is False
