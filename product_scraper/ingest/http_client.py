"""Direct and proxied HTTP fetchers with backoff and block-aware early exit."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from product_scraper import metrics
from product_scraper.config import Settings
from product_scraper.ingest.base import FetchTier, TierResult
from product_scraper.ingest.block_detector import looks_like_bot_block
from product_scraper.ingest.user_agent_pool import UserAgentPool, browser_headers, user_agent_pool

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

# Statuses retried with backoff instead of being returned to the caller
TRANSIENT_STATUSES = frozenset({429})

BACKOFF_BASE_SECONDS = 0.25


def backoff_delay(attempt: int) -> float:
    """Delay after a failed 1-based attempt: 250ms * 2^attempt."""
    return BACKOFF_BASE_SECONDS * (2 ** attempt)


def is_transient_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in TRANSIENT_STATUSES


def create_client(settings: Settings, **kwargs) -> httpx.AsyncClient:
    """
    Create the shared outbound client.

    The pool size bounds concurrent scrapes, so it should be comparable to the
    expected request volume.
    """
    return httpx.AsyncClient(
        timeout=settings.scraper_timeout_seconds,
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_keepalive,
        ),
        **kwargs,
    )


class RetryingFetcher:
    """
    GET a URL with user agent rotation and exponential backoff.

    Per attempt:
    - transport error, 5xx, 429: retry after ``backoff_delay(attempt)``
    - 403 or a bot-block body: stop and report the blocked body
    - any other status (2xx or non-block 4xx): stop and report the response
    """

    tier = FetchTier.DIRECT

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_attempts: int = 3,
        timeout: float = 10.0,
        user_agents: Optional[UserAgentPool] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.client = client
        self.max_attempts = max(1, max_attempts)
        self.timeout = timeout
        self.user_agents = user_agents or user_agent_pool
        self.sleep = sleep

    async def try_fetch(self, url: str) -> TierResult:
        """
        Fetch URL, retrying transient failures.

        Returns:
            TierResult with the last response, blocked body and last error observed
        """
        result = TierResult(tier=self.tier)
        name = self.tier.value

        for attempt in range(1, self.max_attempts + 1):
            result.attempts = attempt
            headers = browser_headers(self.user_agents.get_random())

            try:
                resp = await self.client.get(
                    url,
                    headers=headers,
                    timeout=self.timeout,
                    follow_redirects=True,
                )
            except httpx.RequestError as e:
                result.last_error = f"{type(e).__name__}: {e}"
                metrics.record_fetch_attempt(name, "error")
                if attempt < self.max_attempts:
                    delay = backoff_delay(attempt)
                    logger.warning(
                        f"{name}: Transport error ({type(e).__name__}), "
                        f"retrying in {delay:.2f}s (attempt {attempt}/{self.max_attempts})"
                    )
                    await self.sleep(delay)
                continue

            sc = resp.status_code
            result.response = resp
            metrics.record_fetch_attempt(name, str(sc))

            if is_transient_status(sc):
                result.last_error = f"Remote returned {sc} {resp.reason_phrase}"
                if attempt < self.max_attempts:
                    delay = backoff_delay(attempt)
                    logger.warning(
                        f"{name}: Status {sc}, retrying in {delay:.2f}s "
                        f"(attempt {attempt}/{self.max_attempts})"
                    )
                    await self.sleep(delay)
                continue

            body = resp.text
            if sc == 403 or looks_like_bot_block(body):
                logger.warning(f"{name}: Blocked response ({sc}) for {url}")
                result.blocked_body = body
                result.blocked_tier = self.tier
                return result

            if not resp.is_success:
                logger.info(f"{name}: Non-OK status {sc} for {url}, not retrying")
            return result

        logger.warning(f"{name}: Gave up on {url} after {self.max_attempts} attempts: {result.last_error}")
        return result


class ProxyFetcher(RetryingFetcher):
    """RetryingFetcher routed through a forward proxy; owns its client."""

    tier = FetchTier.PROXY

    @classmethod
    def create(
        cls,
        proxy_url: str,
        max_attempts: int = 3,
        timeout: float = 10.0,
        user_agents: Optional[UserAgentPool] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> Optional["ProxyFetcher"]:
        """
        Build a proxied fetcher.

        Returns:
            ProxyFetcher, or None when the proxy client cannot be constructed
            (malformed URL, SOCKS proxy without the socks extra installed)
        """
        try:
            client = httpx.AsyncClient(
                proxy=proxy_url,
                timeout=timeout,
                follow_redirects=True,
            )
        except (ImportError, ValueError, TypeError, httpx.InvalidURL) as e:
            logger.warning(f"Proxy configured but unavailable: {type(e).__name__}: {e}")
            return None
        return cls(client, max_attempts=max_attempts, timeout=timeout, user_agents=user_agents, sleep=sleep)

    async def close(self):
        """Close the proxied client."""
        await self.client.aclose()

    async def __aenter__(self) -> "ProxyFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
