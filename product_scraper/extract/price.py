"""Price parsing from free-form text."""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"\d[\d.,]*")

# Currency symbol followed by a whole numeric token; separators are resolved by parse_price
CURRENCY_PRICE_RE = re.compile(r"[\$€£]\s*(\d[\d.,]*\d|\d)")


def _normalize_separators(token: str) -> str:
    """Turn ``1,299.99`` / ``1.299,99`` / ``24,99`` into a Decimal-parsable string."""
    token = token.rstrip(".,")
    has_comma, has_dot = "," in token, "." in token

    if has_comma and has_dot:
        # Whichever separator comes last is the decimal point
        if token.rfind(",") > token.rfind("."):
            return token.replace(".", "").replace(",", ".")
        return token.replace(",", "")

    if has_comma:
        head, _, tail = token.rpartition(",")
        if len(tail) in (1, 2):
            return f"{head.replace(',', '')}.{tail}"
        return token.replace(",", "")

    if token.count(".") > 1:
        head, _, tail = token.rpartition(".")
        if len(tail) in (1, 2):
            return f"{head.replace('.', '')}.{tail}"
        return token.replace(".", "")

    return token


def parse_price(value: Any) -> Optional[Decimal]:
    """
    Parse a price value into a Decimal.

    Accepts numbers and strings such as ``"$1,299.99"``, ``"24.99"``,
    ``"€ 24,99"`` or ``"USD 10 - 20"`` (first amount wins).

    Returns:
        Non-negative Decimal, or None if nothing parsable was found
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        match = _NUMBER_RE.search(str(value))
        if not match:
            return None
        try:
            price = Decimal(_normalize_separators(match.group(0)))
        except InvalidOperation:
            logger.debug(f"Could not parse price from: {value!r}")
            return None

    if not price.is_finite() or price < 0:
        return None
    return price


def find_price_in_text(text: str) -> Optional[Decimal]:
    """Find the first currency-prefixed amount anywhere in a document."""
    if not text:
        return None
    match = CURRENCY_PRICE_RE.search(text)
    if not match:
        return None
    return parse_price(match.group(1))
