"""Prometheus metrics for the product scraper."""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("product_scraper", "Product scraper application info")
app_info.info({"version": "0.1.0", "name": "product-scraper"})

# Scrape metrics
scrape_requests_total = Counter(
    "scrape_requests_total",
    "Total number of product scrape requests",
    ["retailer", "outcome"],
)

scrape_duration_seconds = Histogram(
    "scrape_duration_seconds",
    "Time spent on a whole scrape (fetch tiers plus extraction)",
    ["retailer"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

extraction_incomplete_total = Counter(
    "extraction_incomplete_total",
    "Responses that yielded neither a product name nor an image",
    ["retailer"],
)

# Fetch tier metrics
fetch_attempts_total = Counter(
    "fetch_attempts_total",
    "Total number of HTTP attempts per fetch tier",
    ["tier", "status"],
)


def record_fetch_attempt(tier: str, status: str):
    """Record a single HTTP attempt ("200", "403", "error", ...)."""
    fetch_attempts_total.labels(tier=tier, status=status).inc()


def record_scrape(retailer: str, outcome: str, duration: float):
    """Record a finished scrape request."""
    scrape_requests_total.labels(retailer=retailer, outcome=outcome).inc()
    scrape_duration_seconds.labels(retailer=retailer).observe(duration)


def record_extraction_incomplete(retailer: str):
    """Record a response that could not be turned into a usable product."""
    extraction_incomplete_total.labels(retailer=retailer).inc()
