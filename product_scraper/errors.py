"""Scrape failure taxonomy.

Every failure surfaced by ``ProductScraper.scrape_product`` is a ``ScrapeError``
subclass carrying a stable ``code`` and the HTTP status the API maps it to.
"""

from __future__ import annotations

from typing import Any, Optional


class ScrapeError(RuntimeError):
    """Base class for scrape failures reported to the caller."""

    code = "scrape_failed"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        partial: Optional[dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.partial = partial
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details is not None:
            payload["details"] = self.details
        if self.partial is not None:
            payload["partial"] = self.partial
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        return payload


class InvalidInput(ScrapeError):
    """Malformed or non-http(s) URL; raised before any network call."""

    code = "invalid_input"
    status_code = 400


class ProviderUnavailable(ScrapeError):
    """Scraping provider missing or failed. Recorded for diagnostics, never raised to callers."""

    code = "provider_unavailable"
    status_code = 503


class Blocked(ScrapeError):
    """Bot-detection signature or 403 survived every tier."""

    code = "blocked"
    status_code = 423


class UpstreamError(ScrapeError):
    """Final tier returned a non-OK, non-block status."""

    code = "upstream_error"
    status_code = 502

    def __init__(self, message: str, upstream_status: int, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.upstream_status = upstream_status

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["upstream_status"] = self.upstream_status
        return payload


class NoResponse(ScrapeError):
    """No tier produced any HTTP response (transport errors or timeout)."""

    code = "no_response"
    status_code = 504


class ExtractionIncomplete(ScrapeError):
    """A page was fetched but neither a name nor an image could be extracted."""

    code = "extraction_incomplete"
    status_code = 422


class RetailerHardBlock(ScrapeError):
    """Structured provider path failed for a retailer that rejects generic scraping."""

    code = "retailer_hard_block"
    status_code = 400
