"""Shared fixtures: settings without .env, mocked HTTP clients, recorded sleeps."""

from typing import Callable, List

import httpx
import pytest

from product_scraper.config import Settings


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RequestLog:
    """Handler wrapper that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def hosts(self) -> List[str]:
        return [r.url.host for r in self.requests]


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_settings(**overrides) -> Settings:
    values = dict(
        scraping_provider=None,
        scraping_api_key=None,
        scraper_proxy=None,
        scraper_max_attempts=3,
        scrape_timeout_seconds=5.0,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def settings() -> Settings:
    return make_settings()
