"""Product extraction from fetched HTML.

Strategies run in priority order over a shared ``ProductBuilder``. Each
strategy only fills fields that are still empty, so structured data wins
over meta tags, meta tags over CSS heuristics, and heuristics over the
whole-document price scan.
"""

import logging
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from selectolax.parser import HTMLParser, Node

from product_scraper.extract.categorizer import categorize, detect_color
from product_scraper.extract.images import image_src
from product_scraper.extract.json_ld import extract_json_ld, find_product_node, node_images, offer_price
from product_scraper.extract.models import ProductBuilder, ProductRecord, clean_text
from product_scraper.extract.price import CURRENCY_PRICE_RE, find_price_in_text, parse_price

logger = logging.getLogger(__name__)

NAME_SELECTORS = [
    "h1.product-title",
    'h1[itemprop="name"]',
    ".product-name",
    "h1",
]

GALLERY_SELECTORS = [
    "img.product-image",
    'img[itemprop="image"]',
    ".product-photo img",
    "#product-image",
    ".product-gallery img",
    ".product-thumbnails img",
    ".carousel img",
]

IMAGE_SRC_ATTRS = ("src", "data-src", "data-lazy")

PRICE_SELECTORS = [
    ".product-price",
    '[itemprop="price"]',
    ".price",
]

BRAND_SELECTORS = [
    '[itemprop="brand"]',
    ".product-brand",
]


class Document:
    """Parsed page handed to each strategy."""

    def __init__(self, html: str, source_url: str):
        self.html = html or ""
        self.source_url = source_url
        self.tree = HTMLParser(self.html)

    def meta(self, key: str) -> Optional[str]:
        """``content`` of ``<meta property=key>`` or ``<meta name=key>``."""
        for attr in ("property", "name"):
            node = self.tree.css_first(f'meta[{attr}="{key}"]')
            if node is not None:
                content = node.attributes.get("content")
                if content and content.strip():
                    return content.strip()
        return None

    def first_text(self, selectors: List[str]) -> str:
        """Text of the first selector that matches a non-empty element."""
        for selector in selectors:
            node = self.tree.css_first(selector)
            if node is None:
                continue
            text = clean_text(node.text(deep=True))
            if text:
                return text
        return ""


Strategy = Callable[[Document, ProductBuilder], None]


def _node_image_src(node: Node) -> Optional[str]:
    for attr in IMAGE_SRC_ATTRS:
        value = node.attributes.get(attr)
        if value:
            return value
    return None


def json_ld_strategy(doc: Document, builder: ProductBuilder) -> None:
    """schema.org ``Product`` node from JSON-LD."""
    product = find_product_node(extract_json_ld(doc.tree))
    if product is None:
        return

    builder.set_name(product.get("name"))
    for image in node_images(product):
        builder.add_image(image_src(image))
    builder.set_description(product.get("description"))
    builder.set_brand(product.get("brand"))
    builder.set_price(offer_price(product.get("offers")))
    builder.set_color(product.get("color"))

    rating = product.get("aggregateRating")
    if isinstance(rating, dict):
        builder.set_rating(rating.get("ratingValue"))
        builder.set_reviews_count(rating.get("reviewCount") or rating.get("ratingCount"))


def meta_tag_strategy(doc: Document, builder: ProductBuilder) -> None:
    """OpenGraph, Twitter card and price meta tags."""
    builder.add_image(doc.meta("og:image"))
    builder.add_image(doc.meta("twitter:image"))
    builder.set_description(doc.meta("og:description"))
    builder.set_description(doc.meta("description"))
    builder.set_price(doc.meta("product:price:amount") or doc.meta("price"))


def css_selector_strategy(doc: Document, builder: ProductBuilder) -> None:
    """Common product page markup."""
    builder.set_name(doc.first_text(NAME_SELECTORS))

    for selector in GALLERY_SELECTORS:
        for node in doc.tree.css(selector):
            builder.add_image(_node_image_src(node))

    if not builder.has_images:
        first_img = doc.tree.css_first("img")
        if first_img is not None:
            builder.add_image(first_img.attributes.get("src"))

    if builder.price is None:
        builder.set_price(_selector_price(doc))

    builder.set_brand(doc.first_text(BRAND_SELECTORS) or doc.meta("og:site_name"))


def _selector_price(doc: Document):
    for selector in PRICE_SELECTORS:
        node = doc.tree.css_first(selector)
        if node is None:
            continue
        content = node.attributes.get("content")
        if content:
            price = parse_price(content)
            if price is not None:
                return price
        text = clean_text(node.text(deep=True))
        if not text:
            continue
        match = CURRENCY_PRICE_RE.search(text)
        price = parse_price(match.group(1) if match else text)
        if price is not None:
            return price
    return None


def document_price_strategy(doc: Document, builder: ProductBuilder) -> None:
    """Last resort: first currency-prefixed amount anywhere in the raw HTML."""
    if builder.price is None:
        builder.set_price(find_price_in_text(doc.html))


def name_from_url(url: str, brand: str) -> str:
    """Product name guessed from the last URL path segment."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    last = segments[-1] if segments else ""
    name = "".join(ch for ch in last.replace("-", " ") if not ch.isdigit())
    name = clean_text(name)
    return name or f"Item from {brand}"


def hostname_label(url: str) -> str:
    """``https://www.shop.example.com/...`` -> ``shop``."""
    hostname = (urlparse(url).hostname or "").lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname.split(".")[0] if hostname else ""


def finalize_strategy(doc: Document, builder: ProductBuilder) -> None:
    """Derived fields: brand and name fallbacks, category and color."""
    builder.set_brand(hostname_label(doc.source_url))

    if not builder.name and builder.has_images:
        builder.set_name(name_from_url(doc.source_url, builder.brand))

    search_text = f"{builder.name} {builder.description}"
    builder.set_category(categorize(search_text))
    builder.set_color(detect_color(search_text))


DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    json_ld_strategy,
    meta_tag_strategy,
    css_selector_strategy,
    document_price_strategy,
    finalize_strategy,
)


class ExtractionEngine:
    """Run the extraction strategies over a page and build a ``ProductRecord``."""

    def __init__(self, strategies: Tuple[Strategy, ...] = DEFAULT_STRATEGIES):
        self.strategies = strategies

    def extract(self, html: str, source_url: str, retailer: str = "generic") -> ProductRecord:
        """
        Extract a product record from HTML.

        Args:
            html: Page body
            source_url: URL the page was fetched from, used to resolve images
            retailer: Retailer tag stored on the record

        Returns:
            ProductRecord, possibly incomplete (check ``is_usable``)
        """
        doc = Document(html, source_url)
        builder = ProductBuilder(source_url)
        builder.set_retailer(retailer)

        for strategy in self.strategies:
            try:
                strategy(doc, builder)
            except Exception as e:
                logger.warning(f"Extraction strategy {strategy.__name__} failed for {source_url}: {e}")

        record = builder.build()
        logger.debug(
            f"Extracted from {source_url}: name={record.name!r}, price={record.price}, "
            f"images={len(record.images)}, category={record.category}"
        )
        return record
