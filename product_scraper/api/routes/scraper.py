"""Product scraping routes."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from product_scraper.api.deps import get_scraper
from product_scraper.errors import ScrapeError
from product_scraper.extract.models import ProductRecord
from product_scraper.scraper import ProductScraper, ScrapeOptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scraper", tags=["scraper"])


class ScrapeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    use_scraping_api: bool = Field(False, alias="useScrapingApi")
    use_proxy: bool = Field(False, alias="useProxy")
    provider: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")
    render: Optional[bool] = None

    def to_options(self) -> ScrapeOptions:
        return ScrapeOptions(
            provider=self.provider,
            api_key=self.api_key,
            use_scraping_api=self.use_scraping_api,
            use_proxy=self.use_proxy,
            render=self.render,
        )


class ProductResponse(BaseModel):
    url: str
    name: str
    image_url: str
    images: List[str]
    price: Optional[float] = None
    brand: str
    description: str
    category: str
    color: Optional[str] = None
    rating: Optional[float] = None
    reviews_count: Optional[int] = None
    source_category: Optional[str] = None
    retailer: str

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductResponse":
        return cls(**record.to_dict())


class ScrapeResponse(BaseModel):
    success: bool = True
    product: ProductResponse


class ErrorResponse(BaseModel):
    error: str
    code: str
    details: Optional[str] = None
    partial: Optional[Dict[str, Any]] = None
    suggestion: Optional[str] = None
    upstream_status: Optional[int] = None


@router.post(
    "/product",
    response_model=ScrapeResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        423: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def scrape_product(
    body: ScrapeRequest,
    scraper: ProductScraper = Depends(get_scraper),
):
    """Scrape a product page and return the extracted product."""
    try:
        record = await scraper.scrape_product(body.url, body.to_options())
    except ScrapeError as e:
        logger.info(f"Scrape failed for {body.url}: {e.code} ({e.message})")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return ScrapeResponse(product=ProductResponse.from_record(record))
