"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from product_scraper.api.routes import scraper as scraper_routes
from product_scraper.config import settings
from product_scraper.ingest.http_client import create_client
from product_scraper.scraper import ProductScraper

# Configure structured logging
from product_scraper.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting product scraper...")

    client = create_client(settings)
    app.state.scraper = ProductScraper(settings, client=client)
    if settings.scraping_provider and settings.scraping_api_key:
        logger.info(f"Scraping provider configured: {settings.scraping_provider}")
    if settings.scraper_proxy:
        logger.info("Proxy fallback tier enabled")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await app.state.scraper.close()
    await client.aclose()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Product Scraper",
    description="Fetch product pages through tiered fallbacks and extract structured product data",
    version="0.1.0",
    lifespan=lifespan,
)

# Add Prometheus instrumentation
instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=True,
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/metrics", "/health"],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
)
instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["monitoring"])

# Include API routes
app.include_router(scraper_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    # Run with uvicorn
    uvicorn.run(
        "product_scraper.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
