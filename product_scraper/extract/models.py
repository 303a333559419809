"""Product record and the fill-only builder used by extraction strategies."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, List, Optional

from product_scraper.extract.categorizer import DEFAULT_CATEGORY
from product_scraper.extract.images import normalize_image_url
from product_scraper.extract.price import parse_price

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: Any) -> str:
    """Collapse whitespace; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


@dataclass
class ProductRecord:
    """Normalized product extracted from a page or provider payload."""

    url: str
    name: str = ""
    image_url: str = ""
    images: List[str] = field(default_factory=list)
    price: Optional[Decimal] = None
    brand: str = ""
    description: str = ""
    category: str = DEFAULT_CATEGORY
    color: Optional[str] = None
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    source_category: Optional[str] = None
    retailer: str = "generic"

    @property
    def is_usable(self) -> bool:
        """A record is usable when it has a name or a primary image."""
        return bool(self.name) or bool(self.image_url)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["price"] = float(self.price) if self.price is not None else None
        return data


class ProductBuilder:
    """
    Mutable-until-built product record.

    Setters only fill fields that are still empty, so earlier (higher
    priority) strategies are never overwritten by later ones. Images
    accumulate in insertion order without duplicates.
    """

    def __init__(self, source_url: str):
        self.source_url = source_url
        self._record = ProductRecord(url=source_url)
        self._category_set = False
        self._seen_images: set[str] = set()

    @property
    def record(self) -> ProductRecord:
        return self._record

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def description(self) -> str:
        return self._record.description

    @property
    def brand(self) -> str:
        return self._record.brand

    @property
    def price(self) -> Optional[Decimal]:
        return self._record.price

    @property
    def color(self) -> Optional[str]:
        return self._record.color

    @property
    def has_images(self) -> bool:
        return bool(self._record.images)

    def set_name(self, value: Any) -> None:
        if not self._record.name:
            self._record.name = clean_text(value)

    def set_description(self, value: Any) -> None:
        if not self._record.description:
            self._record.description = clean_text(value)

    def set_brand(self, value: Any) -> None:
        if isinstance(value, dict):
            value = value.get("name")
        if not self._record.brand:
            self._record.brand = clean_text(value)

    def set_price(self, value: Any) -> None:
        if self._record.price is None:
            self._record.price = parse_price(value)

    def set_color(self, value: Any) -> None:
        if not self._record.color:
            self._record.color = clean_text(value).lower() or None

    def set_category(self, value: Any) -> None:
        if not self._category_set and clean_text(value):
            self._record.category = clean_text(value)
            self._category_set = True

    def set_source_category(self, value: Any) -> None:
        if not self._record.source_category:
            self._record.source_category = clean_text(value) or None

    def set_rating(self, value: Any) -> None:
        if self._record.rating is None and value is not None:
            try:
                self._record.rating = float(value)
            except (TypeError, ValueError):
                pass

    def set_reviews_count(self, value: Any) -> None:
        if self._record.reviews_count is None and value is not None:
            try:
                self._record.reviews_count = int(str(value).replace(",", ""))
            except (TypeError, ValueError):
                pass

    def set_retailer(self, value: str) -> None:
        self._record.retailer = value

    def add_image(self, src: Any) -> None:
        url = normalize_image_url(src, self.source_url)
        if url and url not in self._seen_images:
            self._seen_images.add(url)
            self._record.images.append(url)
            if not self._record.image_url:
                self._record.image_url = url

    def build(self) -> ProductRecord:
        return self._record
