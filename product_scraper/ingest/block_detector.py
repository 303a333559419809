"""Bot-block signature detection over response bodies."""

from typing import Any

# Lower-case substrings that indicate an anti-bot wall rather than a product page
BLOCK_INDICATORS = (
    "captcha",
    "cloudflare",
    "cf-chl-bypass",
    "access denied",
    "verify you are human",
    "are you a robot",
    "bad request",
    "bot detection",
)


def looks_like_bot_block(body: Any) -> bool:
    """Return True if the body text contains a known block indicator."""
    if not body or not isinstance(body, str):
        return False
    lower = body.lower()
    return any(indicator in lower for indicator in BLOCK_INDICATORS)
