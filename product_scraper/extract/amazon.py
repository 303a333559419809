"""Map the structured Amazon product payload to a ProductRecord."""

import logging
from typing import Any, Dict, Optional

from product_scraper.extract.categorizer import categorize, detect_color
from product_scraper.extract.models import ProductBuilder, ProductRecord
from product_scraper.ingest.retailers import Retailer

logger = logging.getLogger(__name__)

# Tracking pixels that show up in the image fields
IGNORED_IMAGE_MARKERS = ("fls-na.amazon", "uedata")


def _is_product_image(url: Any) -> bool:
    if not isinstance(url, str) or not url:
        return False
    return not any(marker in url for marker in IGNORED_IMAGE_MARKERS)


def _price_value(value: Any) -> Optional[Any]:
    if isinstance(value, dict):
        for key in ("value", "amount", "raw"):
            if value.get(key) not in (None, ""):
                return value[key]
        return None
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return value
    return None


def map_amazon_product(data: Dict[str, Any], source_url: str) -> ProductRecord:
    """
    Build a ProductRecord from a provider's Amazon product JSON.

    Args:
        data: Decoded payload from ``ProviderAdapter.fetch_amazon_product``
        source_url: Original product URL

    Returns:
        ProductRecord with retailer ``amazon``
    """
    builder = ProductBuilder(source_url)
    builder.set_retailer(Retailer.AMAZON.value)

    main_image = data.get("main_image")
    if _is_product_image(main_image):
        builder.add_image(main_image)

    images = data.get("images")
    if isinstance(images, list):
        for image in images:
            if _is_product_image(image):
                builder.add_image(image)

    if not builder.has_images:
        builder.add_image(data.get("image_url"))

    builder.set_price(_price_value(data.get("price")))
    if builder.price is None:
        builder.set_price(_price_value(data.get("buybox_price")))

    builder.set_name(data.get("title") or data.get("name"))
    builder.set_brand(data.get("brand") or data.get("manufacturer") or "Amazon")

    description = data.get("description")
    bullets = data.get("feature_bullets")
    if not description and isinstance(bullets, list):
        description = " ".join(str(b) for b in bullets if b)
    builder.set_description(description)

    builder.set_color(data.get("color"))

    categories = data.get("categories")
    if isinstance(categories, list) and categories:
        first = categories[0]
        if isinstance(first, dict):
            first = first.get("name")
        builder.set_source_category(first)

    builder.set_rating(data.get("rating"))
    builder.set_reviews_count(data.get("reviews_count") or data.get("total_reviews"))

    search_text = f"{builder.name} {builder.description}"
    builder.set_category(categorize(search_text))
    builder.set_color(detect_color(search_text))

    record = builder.build()
    logger.info(f"Mapped Amazon product: {record.name!r} (price={record.price})")
    return record
