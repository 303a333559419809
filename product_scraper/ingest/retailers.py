"""Retailer detection and product identifier extraction from product URLs."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class Retailer(str, Enum):
    """Known retailers; anything else is generic."""
    AMAZON = "amazon"
    ZARA = "zara"
    HM = "hm"
    ASOS = "asos"
    SHEIN = "shein"
    NIKE = "nike"
    ADIDAS = "adidas"
    GAP = "gap"
    FOREVER21 = "forever21"
    URBAN_OUTFITTERS = "urban-outfitters"
    GENERIC = "generic"


# Hostname substring rules, checked in order
RETAILER_HOST_RULES: list[tuple[tuple[str, ...], Retailer]] = [
    (("amazon",), Retailer.AMAZON),
    (("zara",), Retailer.ZARA),
    (("hm.com", "h&m"), Retailer.HM),
    (("asos",), Retailer.ASOS),
    (("shein",), Retailer.SHEIN),
    (("nike",), Retailer.NIKE),
    (("adidas",), Retailer.ADIDAS),
    (("gap",), Retailer.GAP),
    (("forever21",), Retailer.FOREVER21),
    (("urbanoutfitters",), Retailer.URBAN_OUTFITTERS),
]

# Amazon ASIN path patterns, most common first
ASIN_PATTERNS = [
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/aw/d/([A-Z0-9]{10})", re.IGNORECASE),  # mobile
    re.compile(r"/product/([A-Z0-9]{10})", re.IGNORECASE),
]


@dataclass(frozen=True)
class RetailerIdentifier:
    """Retailer tag plus the retailer-specific product id, when one exists."""
    retailer: Retailer
    product_id: Optional[str] = None


def detect_retailer(hostname: str) -> Retailer:
    """
    Detect retailer from a hostname.

    Args:
        hostname: Host part of the product URL

    Returns:
        Retailer tag, ``Retailer.GENERIC`` when nothing matches
    """
    host = (hostname or "").lower()
    for needles, retailer in RETAILER_HOST_RULES:
        if any(needle in host for needle in needles):
            return retailer
    return Retailer.GENERIC


def extract_retailer_id(url: str) -> Optional[str]:
    """
    Extract the Amazon ASIN from a product URL.

    Args:
        url: Product URL

    Returns:
        ASIN, or None for non-Amazon hosts, unmatched paths, or malformed URLs
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname or ""
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not parse URL for identifier extraction: {e}")
        return None

    if detect_retailer(hostname) is not Retailer.AMAZON:
        return None

    for pattern in ASIN_PATTERNS:
        match = pattern.search(parsed.path)
        if match:
            return match.group(1)
    return None


def identify(url: str) -> RetailerIdentifier:
    """Compute the retailer tag and product id for a URL."""
    try:
        hostname = urlparse(url).hostname or ""
    except (TypeError, ValueError):
        hostname = ""
    retailer = detect_retailer(hostname)
    product_id = extract_retailer_id(url) if retailer is Retailer.AMAZON else None
    return RetailerIdentifier(retailer=retailer, product_id=product_id)
