"""Tiered fetch orchestration: provider, then direct, then proxy.

The run is an explicit state machine::

    PROVIDER -> DIRECT -> PROXY -> DONE

A successful provider response is final. The proxy tier only runs when a
proxy is configured and the direct tier saw a block signal (blocked body or
HTTP 403) or the caller asked for the proxy explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from product_scraper.config import Settings
from product_scraper.errors import ProviderUnavailable
from product_scraper.ingest.base import (
    Blocked,
    DirectSuccess,
    FetchOutcome,
    FetchRequest,
    FetchTier,
    HardFailure,
    ProviderSuccess,
    TierResult,
    TransientFailure,
)
from product_scraper.ingest.http_client import ProxyFetcher, RetryingFetcher, Sleeper
from product_scraper.ingest.providers import ProviderAdapter

logger = logging.getLogger(__name__)

ProxyFactory = Callable[[str], Optional[ProxyFetcher]]


class FetchStage(Enum):
    PROVIDER = "provider"
    DIRECT = "direct"
    PROXY = "proxy"
    DONE = "done"


class FetchOrchestrator:
    """Sequence the fetch tiers for one URL and classify the final result."""

    def __init__(
        self,
        provider_adapter: ProviderAdapter,
        direct_fetcher: RetryingFetcher,
        proxy_factory: Optional[ProxyFactory] = None,
        proxy_url: Optional[str] = None,
        default_provider: Optional[str] = None,
        default_api_key: Optional[str] = None,
        snippet_chars: int = 1000,
    ):
        self.provider_adapter = provider_adapter
        self.direct_fetcher = direct_fetcher
        self.proxy_url = proxy_url
        self.default_provider = default_provider
        self.default_api_key = default_api_key
        self.snippet_chars = snippet_chars
        self._proxy_factory = proxy_factory or self._build_proxy_fetcher

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider_adapter: ProviderAdapter,
        direct_fetcher: RetryingFetcher,
        proxy_factory: Optional[ProxyFactory] = None,
    ) -> "FetchOrchestrator":
        return cls(
            provider_adapter=provider_adapter,
            direct_fetcher=direct_fetcher,
            proxy_factory=proxy_factory,
            proxy_url=settings.scraper_proxy,
            default_provider=settings.scraping_provider,
            default_api_key=settings.scraping_api_key,
            snippet_chars=settings.body_snippet_chars,
        )

    def _build_proxy_fetcher(self, proxy_url: str) -> Optional[ProxyFetcher]:
        direct = self.direct_fetcher
        return ProxyFetcher.create(
            proxy_url,
            max_attempts=direct.max_attempts,
            timeout=direct.timeout,
            user_agents=direct.user_agents,
            sleep=direct.sleep,
        )

    def resolve_provider(self, request: FetchRequest) -> tuple[Optional[str], Optional[str]]:
        """Provider name and key for a request; request values override configuration."""
        return (
            request.provider or self.default_provider,
            request.api_key or self.default_api_key,
        )

    def should_use_provider(self, request: FetchRequest) -> bool:
        provider, api_key = self.resolve_provider(request)
        return request.use_scraping_api or bool(provider and api_key)

    def should_escalate(self, request: FetchRequest, direct: TierResult) -> bool:
        """Proxy tier runs only on a block-like signal or an explicit request."""
        if not self.proxy_url:
            return False
        return (
            direct.blocked_body is not None
            or direct.status_code == 403
            or request.use_proxy
        )

    async def run(self, request: FetchRequest) -> FetchOutcome:
        """
        Run the tiers for a request.

        Args:
            request: Fetch request

        Returns:
            Exactly one FetchOutcome variant
        """
        stage = FetchStage.PROVIDER
        result = TierResult(tier=FetchTier.DIRECT)

        while stage is not FetchStage.DONE:
            if stage is FetchStage.PROVIDER:
                if self.should_use_provider(request):
                    try:
                        return await self._provider_stage(request)
                    except ProviderUnavailable as e:
                        logger.warning(f"Provider tier failed, falling back to direct fetch: {e.message}")
                stage = FetchStage.DIRECT

            elif stage is FetchStage.DIRECT:
                result = await self.direct_fetcher.try_fetch(request.url)
                if self.should_escalate(request, result):
                    logger.info(
                        f"Escalating {request.url} to proxy tier "
                        f"(blocked={result.blocked_body is not None}, status={result.status_code}, "
                        f"forced={request.use_proxy})"
                    )
                    stage = FetchStage.PROXY
                else:
                    stage = FetchStage.DONE

            elif stage is FetchStage.PROXY:
                proxy_result = await self._proxy_stage(request.url)
                if proxy_result is not None:
                    result = proxy_result.merge(result)
                stage = FetchStage.DONE

        return self.classify(result)

    async def _provider_stage(self, request: FetchRequest) -> FetchOutcome:
        provider, api_key = self.resolve_provider(request)
        resp = await self.provider_adapter.fetch(request.url, provider, api_key, render=request.render)

        if resp is None:
            raise ProviderUnavailable(f"provider {provider!r} unavailable or not configured")

        if not resp.is_success:
            raise ProviderUnavailable(
                f"provider {provider!r} returned {resp.status_code}",
                details=resp.text[: self.snippet_chars],
            )

        return ProviderSuccess(
            tier=FetchTier.PROVIDER,
            body=resp.text,
            content_type=resp.headers.get("content-type", ""),
        )

    async def _proxy_stage(self, url: str) -> Optional[TierResult]:
        fetcher = self._proxy_factory(self.proxy_url)
        if fetcher is None:
            logger.warning("Proxy configured but not available; keeping direct result")
            return None
        async with fetcher:
            return await fetcher.try_fetch(url)

    def classify(self, result: TierResult) -> FetchOutcome:
        """Map the surviving response/blocked-body/error triple to an outcome."""
        resp = result.response
        n = self.snippet_chars

        # A flagged 2xx body only drives escalation; the final 2xx goes to extraction
        if resp is not None and resp.is_success:
            return DirectSuccess(
                tier=result.tier,
                last_error=result.last_error,
                body=resp.text,
                status_code=resp.status_code,
            )

        if result.blocked_body is not None or (resp is not None and resp.status_code == 403):
            body = result.blocked_body if result.blocked_body is not None else resp.text
            return Blocked(
                tier=result.blocked_tier or result.tier,
                last_error=result.last_error,
                body_snippet=body[:n],
                status_code=result.status_code,
            )

        if resp is not None:
            return HardFailure(
                tier=result.tier,
                last_error=result.last_error,
                status_code=resp.status_code,
                body=resp.text[:n],
            )

        return TransientFailure(
            tier=result.tier,
            last_error=result.last_error or "No response from fetch attempts",
        )


def build_orchestrator(
    settings: Settings,
    client,
    sleep: Sleeper = asyncio.sleep,
    proxy_factory: Optional[ProxyFactory] = None,
) -> FetchOrchestrator:
    """Wire provider adapter, direct fetcher and orchestrator from settings."""
    provider_adapter = ProviderAdapter(
        client,
        timeout=settings.provider_timeout_seconds,
        structured_timeout=settings.amazon_api_timeout_seconds,
        default_render=settings.provider_render_js,
    )
    direct_fetcher = RetryingFetcher(
        client,
        max_attempts=settings.scraper_max_attempts,
        timeout=settings.scraper_timeout_seconds,
        sleep=sleep,
    )
    return FetchOrchestrator.from_settings(
        settings,
        provider_adapter=provider_adapter,
        direct_fetcher=direct_fetcher,
        proxy_factory=proxy_factory,
    )
