"""Tests for the scrape_product operation."""

import asyncio

import httpx
import pytest

from conftest import RequestLog, make_settings, mock_client
from product_scraper.errors import (
    Blocked,
    ExtractionIncomplete,
    InvalidInput,
    NoResponse,
    RetailerHardBlock,
    UpstreamError,
)
from product_scraper.scraper import AMAZON_SUGGESTION, ProductScraper, ScrapeOptions

URL = "https://shop.example.com/products/blue-crew-tee"
AMAZON_URL = "https://www.amazon.com/dp/B08N5WRWNW/ref=sr_1_1"
PRODUCT_HTML = """
<html><head>
<script type="application/ld+json">
{"@type": "Product", "name": "Blue Crew Tee", "image": "/img/tee.jpg",
 "offers": {"price": "24.99"}}
</script>
</head><body></body></html>
"""


def scraper_for(handler, sleep, **settings_overrides):
    return ProductScraper(
        make_settings(**settings_overrides),
        client=mock_client(handler),
        sleep=sleep,
    )


@pytest.mark.asyncio
async def test_scrape_generic_product(sleep_recorder):
    log = RequestLog(lambda request: httpx.Response(200, text=PRODUCT_HTML))
    scraper = scraper_for(log, sleep_recorder)

    record = await scraper.scrape_product(URL)

    assert record.name == "Blue Crew Tee"
    assert str(record.price) == "24.99"
    assert record.image_url == "https://shop.example.com/img/tee.jpg"
    assert record.retailer == "generic"
    assert log.hosts() == ["shop.example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "ftp://example.com/item", "shop.example.com/p/1", "https:///nohost"])
async def test_invalid_url_makes_no_request(url, sleep_recorder):
    log = RequestLog(lambda request: httpx.Response(200, text=PRODUCT_HTML))
    scraper = scraper_for(log, sleep_recorder)

    with pytest.raises(InvalidInput) as exc_info:
        await scraper.scrape_product(url)

    assert exc_info.value.status_code == 400
    assert log.requests == []


@pytest.mark.asyncio
async def test_extraction_incomplete_carries_partial(sleep_recorder):
    scraper = scraper_for(lambda request: httpx.Response(200, text="<p>hello</p>"), sleep_recorder)

    with pytest.raises(ExtractionIncomplete) as exc_info:
        await scraper.scrape_product(URL)

    error = exc_info.value
    assert error.status_code == 422
    assert error.partial["url"] == URL
    assert error.partial["name"] == ""
    assert error.to_dict()["code"] == "extraction_incomplete"


@pytest.mark.asyncio
async def test_blocked(sleep_recorder):
    scraper = scraper_for(lambda request: httpx.Response(403, text="Access Denied"), sleep_recorder)

    with pytest.raises(Blocked) as exc_info:
        await scraper.scrape_product(URL)

    assert exc_info.value.status_code == 423
    assert exc_info.value.details == "Access Denied"


@pytest.mark.asyncio
async def test_upstream_error(sleep_recorder):
    scraper = scraper_for(lambda request: httpx.Response(404, text="Not found"), sleep_recorder)

    with pytest.raises(UpstreamError) as exc_info:
        await scraper.scrape_product(URL)

    assert exc_info.value.upstream_status == 404
    assert exc_info.value.status_code == 502
    assert exc_info.value.details == "Not found"


@pytest.mark.asyncio
async def test_no_response(sleep_recorder):
    def refuse(request):
        raise httpx.ConnectError("connection refused")

    scraper = scraper_for(refuse, sleep_recorder)

    with pytest.raises(NoResponse) as exc_info:
        await scraper.scrape_product(URL)

    assert "ConnectError" in exc_info.value.details
    assert sleep_recorder.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_overall_timeout_is_no_response():
    scraper = scraper_for(
        lambda request: httpx.Response(503, text="busy"),
        asyncio.sleep,
        scrape_timeout_seconds=0.05,
    )

    with pytest.raises(NoResponse) as exc_info:
        await scraper.scrape_product(URL)

    assert exc_info.value.code == "no_response"


@pytest.mark.asyncio
async def test_request_options_select_provider(sleep_recorder):
    log = RequestLog(lambda request: httpx.Response(200, text=PRODUCT_HTML))
    scraper = scraper_for(log, sleep_recorder)

    record = await scraper.scrape_product(
        URL, ScrapeOptions(provider="scraperapi", api_key="REQ-KEY", use_scraping_api=True)
    )

    assert record.name == "Blue Crew Tee"
    assert log.hosts() == ["api.scraperapi.com"]
    assert log.requests[0].url.params["api_key"] == "REQ-KEY"


@pytest.mark.asyncio
async def test_amazon_structured_path(sleep_recorder):
    def handler(request):
        assert request.url.path == "/api/v1/amazon/product"
        return httpx.Response(200, json={
            "title": "Men's Zip-Up Hoodie, Navy",
            "main_image": "https://m.media-amazon.com/images/I/hoodie.jpg",
            "price": {"value": "39.99"},
        })

    log = RequestLog(handler)
    scraper = scraper_for(log, sleep_recorder, scraping_provider="scrapingbee", scraping_api_key="KEY")

    record = await scraper.scrape_product(AMAZON_URL)

    assert record.retailer == "amazon"
    assert record.category == "hoodie"
    assert log.requests[0].url.params["query"] == "B08N5WRWNW"
    assert len(log.requests) == 1


@pytest.mark.asyncio
async def test_amazon_failure_does_not_fall_through(sleep_recorder):
    log = RequestLog(lambda request: httpx.Response(500, text="error"))
    scraper = scraper_for(log, sleep_recorder, scraping_provider="scrapingbee", scraping_api_key="KEY")

    with pytest.raises(RetailerHardBlock) as exc_info:
        await scraper.scrape_product(AMAZON_URL)

    assert exc_info.value.suggestion == AMAZON_SUGGESTION
    assert exc_info.value.status_code == 400
    assert log.hosts() == ["app.scrapingbee.com"]
    assert len(log.requests) == 1


@pytest.mark.asyncio
async def test_amazon_without_structured_provider_uses_generic_path(sleep_recorder):
    log = RequestLog(lambda request: httpx.Response(200, text=PRODUCT_HTML))
    scraper = scraper_for(log, sleep_recorder)

    record = await scraper.scrape_product(AMAZON_URL)

    assert record.retailer == "amazon"
    assert log.hosts() == ["www.amazon.com"]


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open(sleep_recorder):
    client = mock_client(lambda request: httpx.Response(200, text=PRODUCT_HTML))
    scraper = ProductScraper(make_settings(), client=client, sleep=sleep_recorder)
    await scraper.close()
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_cloudflare_beacon_page_is_extracted(sleep_recorder):
    beacon_page = PRODUCT_HTML.replace(
        "<body></body>",
        '<body><script defer src="https://static.cloudflareinsights.com/beacon.min.js"></script></body>',
    )
    log = RequestLog(lambda request: httpx.Response(200, text=beacon_page))
    scraper = scraper_for(log, sleep_recorder)

    record = await scraper.scrape_product(URL)

    assert record.name == "Blue Crew Tee"
    assert str(record.price) == "24.99"
    assert len(log.requests) == 1


@pytest.mark.asyncio
async def test_captcha_200_without_proxy_is_extraction_incomplete(sleep_recorder):
    scraper = scraper_for(
        lambda request: httpx.Response(200, text="<p>Please solve this captcha</p>"),
        sleep_recorder,
    )

    with pytest.raises(ExtractionIncomplete):
        await scraper.scrape_product(URL)
