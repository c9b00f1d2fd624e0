# Scraper package - Page rendering and external data fetchers
from .extractor import ScrapeResult, build_signals, scrape_page
from .external import create_http_client, fetch_pagespeed, fetch_security_headers

__all__ = [
    "ScrapeResult",
    "build_signals",
    "scrape_page",
    "create_http_client",
    "fetch_pagespeed",
    "fetch_security_headers",
]
