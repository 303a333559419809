"""Scrape a product page into a ProductRecord.

``ProductScraper.scrape_product`` is the single inbound operation: it
validates the URL, routes Amazon URLs with a known ASIN to the structured
provider endpoint, otherwise runs the tiered fetch and the extraction
engine, and reports every failure as a ``ScrapeError`` subclass.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from product_scraper import metrics
from product_scraper.config import Settings
from product_scraper.errors import (
    Blocked,
    ExtractionIncomplete,
    InvalidInput,
    NoResponse,
    RetailerHardBlock,
    ScrapeError,
    UpstreamError,
)
from product_scraper.extract.amazon import map_amazon_product
from product_scraper.extract.engine import ExtractionEngine
from product_scraper.extract.models import ProductRecord
from product_scraper.ingest import base
from product_scraper.ingest.fetch_pipeline import FetchOrchestrator, ProxyFactory, build_orchestrator
from product_scraper.ingest.http_client import Sleeper, create_client
from product_scraper.ingest.providers import supports_structured_product
from product_scraper.ingest.retailers import Retailer, RetailerIdentifier, identify
from product_scraper.logging_config import get_logger

logger = logging.getLogger(__name__)

AMAZON_SUGGESTION = "Try copying the full product URL from Amazon, or add the item manually."


@dataclass
class ScrapeOptions:
    """Per-call overrides; unset values fall back to configuration."""

    provider: Optional[str] = None
    api_key: Optional[str] = None
    use_scraping_api: bool = False
    use_proxy: bool = False
    render: Optional[bool] = None


def validate_url(url: str) -> str:
    """Return the stripped URL or raise InvalidInput for non-http(s) or host-less URLs."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidInput("Invalid URL format", details=str(e))
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidInput("Invalid URL format", details=f"Expected an absolute http(s) URL, got {url!r}")
    return url


class ProductScraper:
    """Fetch and extract product records."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Sleeper = asyncio.sleep,
        proxy_factory: Optional[ProxyFactory] = None,
        engine: Optional[ExtractionEngine] = None,
    ):
        self.settings = settings
        self._owns_client = client is None
        self.client = client if client is not None else create_client(settings)
        self.orchestrator: FetchOrchestrator = build_orchestrator(
            settings, self.client, sleep=sleep, proxy_factory=proxy_factory
        )
        self.engine = engine or ExtractionEngine()

    async def close(self):
        """Close the outbound client if this scraper created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "ProductScraper":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def scrape_product(self, url: str, options: Optional[ScrapeOptions] = None) -> ProductRecord:
        """
        Scrape one product URL.

        Args:
            url: Absolute http(s) product URL
            options: Per-call provider/proxy overrides

        Returns:
            Usable ProductRecord (has a name or an image)

        Raises:
            ScrapeError: InvalidInput, Blocked, UpstreamError, NoResponse,
                ExtractionIncomplete or RetailerHardBlock
        """
        url = validate_url(url)
        options = options or ScrapeOptions()
        ident = identify(url)
        retailer = ident.retailer.value
        log = get_logger(__name__, retailer=retailer, url=url)
        start = time.monotonic()

        try:
            record = await asyncio.wait_for(
                self._scrape(url, ident, options),
                timeout=self.settings.scrape_timeout_seconds,
            )
        except asyncio.TimeoutError:
            metrics.record_scrape(retailer, NoResponse.code, time.monotonic() - start)
            log.warning(f"Scrape of {url} timed out after {self.settings.scrape_timeout_seconds}s")
            raise NoResponse(
                "Timed out fetching product page",
                details=f"No result within {self.settings.scrape_timeout_seconds} seconds",
            )
        except ScrapeError as e:
            metrics.record_scrape(retailer, e.code, time.monotonic() - start)
            raise

        metrics.record_scrape(retailer, "success", time.monotonic() - start)
        log.info(f"Scraped {retailer} product {record.name!r} from {url}")
        return record

    async def _scrape(self, url: str, ident: RetailerIdentifier, options: ScrapeOptions) -> ProductRecord:
        provider = options.provider or self.settings.scraping_provider
        api_key = options.api_key or self.settings.scraping_api_key

        if (
            ident.retailer is Retailer.AMAZON
            and ident.product_id
            and api_key
            and supports_structured_product(provider)
        ):
            return await self._scrape_amazon(url, ident.product_id, api_key)

        request = base.FetchRequest(
            url=url,
            provider=options.provider,
            api_key=options.api_key,
            use_scraping_api=options.use_scraping_api,
            use_proxy=options.use_proxy,
            render=options.render,
        )
        outcome = await self.orchestrator.run(request)
        body = self._body_or_raise(url, outcome)

        record = self.engine.extract(body, url, retailer=ident.retailer.value)
        if not record.is_usable:
            metrics.record_extraction_incomplete(ident.retailer.value)
            raise ExtractionIncomplete(
                "Could not extract product information from this URL. Please try a direct product page.",
                partial=record.to_dict(),
            )
        return record

    async def _scrape_amazon(self, url: str, asin: str, api_key: str) -> ProductRecord:
        adapter = self.orchestrator.provider_adapter
        data = await adapter.fetch_amazon_product(asin, api_key)
        if data is None:
            raise RetailerHardBlock(
                "Amazon blocks direct scraping and the product API request failed",
                details=f"ASIN {asin}",
                suggestion=AMAZON_SUGGESTION,
            )
        record = map_amazon_product(data, url)
        if not record.is_usable:
            metrics.record_extraction_incomplete(Retailer.AMAZON.value)
            raise ExtractionIncomplete(
                "Amazon product API returned no usable product data",
                partial=record.to_dict(),
            )
        return record

    def _body_or_raise(self, url: str, outcome: base.FetchOutcome) -> str:
        """Body of a successful outcome; failures become ScrapeErrors."""
        if isinstance(outcome, (base.ProviderSuccess, base.DirectSuccess)):
            logger.debug(f"Fetched {url} via {outcome.tier.value} tier")
            return outcome.body

        if isinstance(outcome, base.Blocked):
            raise Blocked(
                "Site blocked the request (bot detection)",
                details=outcome.body_snippet,
            )

        if isinstance(outcome, base.HardFailure):
            raise UpstreamError(
                f"Remote returned {outcome.status_code}",
                upstream_status=outcome.status_code,
                details=outcome.body,
            )

        raise NoResponse(
            "No response from product page",
            details=outcome.last_error,
        )
