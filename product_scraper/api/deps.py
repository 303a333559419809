"""FastAPI dependencies."""

from fastapi import HTTPException, Request, status

from product_scraper.scraper import ProductScraper


def get_scraper(request: Request) -> ProductScraper:
    """Dependency for the application-wide ProductScraper."""
    scraper = getattr(request.app.state, "scraper", None)
    if scraper is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scraper not initialized",
        )
    return scraper
