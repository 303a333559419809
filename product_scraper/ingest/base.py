"""Fetch request, per-tier results, and orchestration outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx


class FetchTier(str, Enum):
    """Fetch tiers in the order they are attempted."""
    PROVIDER = "provider"
    DIRECT = "direct"
    PROXY = "proxy"


@dataclass(frozen=True)
class FetchRequest:
    """A single scrape fetch; request values override configured provider settings."""

    url: str
    provider: Optional[str] = None
    api_key: Optional[str] = None
    use_scraping_api: bool = False
    use_proxy: bool = False
    render: Optional[bool] = None


@dataclass
class TierResult:
    """What one fetch tier observed: last response, blocked body, last error."""

    tier: FetchTier
    response: Optional[httpx.Response] = None
    blocked_body: Optional[str] = None
    last_error: Optional[str] = None
    attempts: int = 0
    blocked_tier: Optional[FetchTier] = None

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    def merge(self, fallback: "TierResult") -> "TierResult":
        """
        Combine this (escalation) result with an earlier tier's result.

        The escalation response wins when it produced one; blocked body and
        last error keep the earlier tier's values, backfilled from this one.
        """
        if fallback.blocked_body is not None:
            blocked_body, blocked_tier = fallback.blocked_body, fallback.blocked_tier
        else:
            blocked_body, blocked_tier = self.blocked_body, self.blocked_tier
        return TierResult(
            tier=self.tier if self.response is not None else fallback.tier,
            response=self.response if self.response is not None else fallback.response,
            blocked_body=blocked_body,
            last_error=fallback.last_error or self.last_error,
            attempts=fallback.attempts + self.attempts,
            blocked_tier=blocked_tier,
        )


@dataclass(frozen=True)
class FetchOutcome:
    """Final result of one orchestration run."""

    tier: FetchTier
    last_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class ProviderSuccess(FetchOutcome):
    body: str = ""
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class DirectSuccess(FetchOutcome):
    body: str = ""
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Blocked(FetchOutcome):
    body_snippet: str = ""
    status_code: Optional[int] = None


@dataclass(frozen=True)
class TransientFailure(FetchOutcome):
    pass


@dataclass(frozen=True)
class HardFailure(FetchOutcome):
    status_code: int = 0
    body: str = ""
