"""Image URL normalization."""

from typing import Any, Optional
from urllib.parse import urljoin, urlparse


def page_origin(url: str) -> str:
    """Scheme and host of a page URL, e.g. ``https://shop.example.com``."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def image_src(value: Any) -> Optional[str]:
    """Pull a URL out of a JSON-LD image value (string or ImageObject)."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        src = value.get("url") or value.get("contentUrl")
        return src if isinstance(src, str) else None
    return None


def normalize_image_url(src: Any, base_url: str) -> Optional[str]:
    """
    Resolve an image reference to an absolute http(s) URL.

    Args:
        src: Raw ``src``/``content`` value
        base_url: Page URL the reference was found on

    Returns:
        Absolute URL, or None for empty values and inline ``data:`` images
    """
    if not isinstance(src, str):
        return None
    src = src.strip()
    if not src or src.lower().startswith("data:"):
        return None
    if src.startswith(("http://", "https://")):
        return src
    origin = page_origin(base_url)
    if not origin:
        return src
    return urljoin(origin + "/", src)
