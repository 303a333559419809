"""Extract product data from JSON-LD structured data in HTML pages."""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

from selectolax.parser import HTMLParser

logger = logging.getLogger(__name__)


def extract_json_ld(tree: HTMLParser) -> List[Any]:
    """
    Extract JSON-LD structured data from script tags.

    Blocks that are not valid JSON are skipped.

    Returns list of decoded JSON-LD documents found in the page.
    """
    results = []
    for index, script in enumerate(tree.css('script[type="application/ld+json"]')):
        text = script.text(deep=True) or ""
        if not text.strip():
            continue
        try:
            results.append(json.loads(text))
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed JSON-LD block #{index}: {e}")
    return results


def _is_product_type(value: Any) -> bool:
    if isinstance(value, str):
        return value == "Product" or value.endswith("/Product")
    if isinstance(value, list):
        return any(_is_product_type(v) for v in value)
    return False


def _iter_nodes(data: Any) -> Iterator[Dict[str, Any]]:
    """Walk top-level lists and ``@graph`` containers."""
    if isinstance(data, list):
        for item in data:
            yield from _iter_nodes(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                yield from _iter_nodes(item)


def find_product_node(documents: List[Any]) -> Optional[Dict[str, Any]]:
    """
    Find the first ``Product`` node across the page's JSON-LD documents.

    Args:
        documents: Output of ``extract_json_ld``

    Returns:
        Product node dict or None
    """
    for document in documents:
        for node in _iter_nodes(document):
            if _is_product_type(node.get("@type")):
                return node
    return None


def offer_price(offers: Any) -> Optional[Any]:
    """Raw price from an ``offers`` object or list (``price`` or ``priceSpecification.price``)."""
    if isinstance(offers, list):
        for offer in offers:
            price = offer_price(offer)
            if price is not None:
                return price
        return None

    if not isinstance(offers, dict):
        return None

    for key in ("price", "lowPrice"):
        if offers.get(key) not in (None, ""):
            return offers[key]

    price_spec = offers.get("priceSpecification")
    if isinstance(price_spec, list):
        price_spec = price_spec[0] if price_spec else None
    if isinstance(price_spec, dict) and price_spec.get("price") not in (None, ""):
        return price_spec["price"]
    return None


def node_images(node: Dict[str, Any]) -> List[Any]:
    """Image value(s) of a product node as a list."""
    image = node.get("image")
    if image is None:
        return []
    if isinstance(image, list):
        return image
    return [image]
