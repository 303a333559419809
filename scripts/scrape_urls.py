#!/usr/bin/env python3
"""
Scrape one or more product URLs and print the results as JSON.

Uses the same settings (.env / environment) as the API server, so a
configured SCRAPING_PROVIDER / SCRAPING_API_KEY / SCRAPER_PROXY applies.

Usage:
    python scripts/scrape_urls.py URL [URL ...] [--use-api] [--use-proxy]
        [--provider scrapingbee|scraperapi] [--api-key KEY] [--no-render]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from product_scraper.config import settings
from product_scraper.errors import ScrapeError
from product_scraper.logging_config import setup_logging
from product_scraper.scraper import ProductScraper, ScrapeOptions


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape product URLs")
    parser.add_argument("urls", nargs="+", help="Product page URLs")
    parser.add_argument("--use-api", action="store_true", help="Force the scraping provider tier")
    parser.add_argument("--use-proxy", action="store_true", help="Force the proxy tier (needs SCRAPER_PROXY)")
    parser.add_argument("--provider", default=None, help="Override SCRAPING_PROVIDER")
    parser.add_argument("--api-key", default=None, help="Override SCRAPING_API_KEY")
    parser.add_argument("--no-render", action="store_true", help="Ask the provider not to render JavaScript")
    return parser.parse_args(argv)


async def scrape_urls(args: argparse.Namespace) -> int:
    """Scrape each URL in turn; returns the number of failures."""
    options = ScrapeOptions(
        provider=args.provider,
        api_key=args.api_key,
        use_scraping_api=args.use_api,
        use_proxy=args.use_proxy,
        render=False if args.no_render else None,
    )
    failures = 0

    async with ProductScraper(settings) as scraper:
        for url in args.urls:
            print(f"\n=== {url}")
            try:
                record = await scraper.scrape_product(url, options)
            except ScrapeError as e:
                failures += 1
                print(json.dumps({"success": False, **e.to_dict()}, indent=2, default=str))
                continue
            print(json.dumps({"success": True, "product": record.to_dict()}, indent=2, default=str))

    return failures


if __name__ == "__main__":
    setup_logging()
    failed = asyncio.run(scrape_urls(parse_args()))
    print(f"\nDone: {failed} failure(s)")
    sys.exit(1 if failed else 0)
