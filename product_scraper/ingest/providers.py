"""Third-party scraping API adapters (ScrapingBee, ScraperAPI)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx

from product_scraper import metrics
from product_scraper.ingest.user_agent_pool import UserAgentPool, browser_headers, user_agent_pool

logger = logging.getLogger(__name__)

SCRAPINGBEE_URL = "https://app.scrapingbee.com/api/v1/"
SCRAPINGBEE_AMAZON_PRODUCT_URL = "https://app.scrapingbee.com/api/v1/amazon/product"
SCRAPERAPI_URL = "http://api.scraperapi.com"

PROVIDER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def _scrapingbee_params(api_key: str, target_url: str, render: bool) -> Dict[str, str]:
    # Regular premium proxy; stealth proxy costs 75 credits per request
    return {
        "api_key": api_key,
        "url": target_url,
        "render_js": "true" if render else "false",
        "block_ads": "true",
        "premium_proxy": "true",
        "country_code": "us",
    }


def _scraperapi_params(api_key: str, target_url: str, render: bool) -> Dict[str, str]:
    params = {"api_key": api_key, "url": target_url}
    if render:
        params["render"] = "true"
    return params


@dataclass(frozen=True)
class ProviderSpec:
    """Endpoint and query-parameter shape of a page-fetch provider."""
    name: str
    endpoint: str
    build_params: Callable[[str, str, bool], Dict[str, str]]
    structured_product_endpoint: Optional[str] = None


PROVIDERS: Dict[str, ProviderSpec] = {
    "scrapingbee": ProviderSpec(
        name="scrapingbee",
        endpoint=SCRAPINGBEE_URL,
        build_params=_scrapingbee_params,
        structured_product_endpoint=SCRAPINGBEE_AMAZON_PRODUCT_URL,
    ),
    "scraperapi": ProviderSpec(
        name="scraperapi",
        endpoint=SCRAPERAPI_URL,
        build_params=_scraperapi_params,
    ),
}


def get_provider(name: Optional[str]) -> Optional[ProviderSpec]:
    """Look up a provider by case-insensitive name."""
    if not name:
        return None
    return PROVIDERS.get(name.strip().lower())


def supports_structured_product(name: Optional[str]) -> bool:
    spec = get_provider(name)
    return bool(spec and spec.structured_product_endpoint)


class ProviderAdapter:
    """Translate "fetch this URL" into a scraping-provider API call."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 10.0,
        structured_timeout: float = 30.0,
        default_render: bool = True,
        user_agents: Optional[UserAgentPool] = None,
    ):
        self.client = client
        self.timeout = timeout
        self.structured_timeout = structured_timeout
        self.default_render = default_render
        self.user_agents = user_agents or user_agent_pool

    async def fetch(
        self,
        target_url: str,
        provider: Optional[str],
        api_key: Optional[str],
        render: Optional[bool] = None,
    ) -> Optional[httpx.Response]:
        """
        Fetch a page through a scraping provider.

        Args:
            target_url: Page to fetch
            provider: Provider name ("scrapingbee" or "scraperapi")
            api_key: Provider API key
            render: JS-render hint; defaults to the configured value

        Returns:
            Provider response (any status), or None if the provider is unknown,
            unconfigured, or the call failed at the transport level
        """
        if not provider or not api_key:
            return None

        spec = get_provider(provider)
        if spec is None:
            logger.warning(f"Unknown scraping provider: {provider}")
            return None

        render_js = self.default_render if render is None else render
        params = spec.build_params(api_key, target_url, render_js)
        headers = browser_headers(self.user_agents.get_random(), accept=PROVIDER_ACCEPT)

        logger.info(f"Using scraping API provider {spec.name} for {target_url}")
        try:
            resp = await self.client.get(
                spec.endpoint,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            metrics.record_fetch_attempt("provider", "error")
            logger.warning(f"Scraping API fetch error ({spec.name}): {type(e).__name__}: {e}")
            return None

        metrics.record_fetch_attempt("provider", str(resp.status_code))
        return resp

    async def fetch_amazon_product(self, asin: str, api_key: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Fetch structured Amazon product data from ScrapingBee.

        Args:
            asin: Amazon ASIN
            api_key: ScrapingBee API key

        Returns:
            Decoded JSON payload on HTTP OK, otherwise None
        """
        if not api_key or not asin:
            return None

        params = {"api_key": api_key, "query": asin, "domain": "com"}
        headers = {"Accept": "application/json", "User-Agent": self.user_agents.get_random()}

        logger.info(f"Using Amazon Product API for ASIN {asin}")
        try:
            resp = await self.client.get(
                SCRAPINGBEE_AMAZON_PRODUCT_URL,
                params=params,
                headers=headers,
                timeout=self.structured_timeout,
            )
        except httpx.RequestError as e:
            metrics.record_fetch_attempt("provider", "error")
            logger.warning(f"Amazon API fetch error for {asin}: {type(e).__name__}: {e}")
            return None

        metrics.record_fetch_attempt("provider", str(resp.status_code))
        if not resp.is_success:
            logger.warning(f"Amazon API returned {resp.status_code} for {asin}")
            return None

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning(f"Amazon API returned invalid JSON for {asin}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Amazon API returned unexpected payload type {type(data).__name__} for {asin}")
            return None
        return data
