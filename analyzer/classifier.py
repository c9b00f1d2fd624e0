"""
Page type classifier.

Maps extracted page signals to one commercial-intent tag. DOM affordances
(add-to-cart, product grid density, checkout forms) are checked before URL
vocabulary within each tier because routing schemes are arbitrary.
"""

import re
from urllib.parse import urlparse

from analyzer.models import PageType
from analyzer.signals import ScrapedSignals

# Minimum product tiles before a page is treated as a listing
COLLECTION_MIN_PRODUCTS = 4
FILTERED_COLLECTION_MIN_PRODUCTS = 2

CHECKOUT_URL = re.compile(r"/(checkouts?|kasse|betaling|payment)(/|$|\?|#|-)", re.IGNORECASE)
CART_URL = re.compile(r"/(cart|basket|kurv|bag)(/|$|\?|#)", re.IGNORECASE)
PRODUCT_URL = re.compile(r"/(products?|produkt(er)?|item|p|dp)/[^/]+", re.IGNORECASE)
COLLECTION_URL = re.compile(
    r"/(collections?|category|categories|kategori(er)?|shop|catalog|c)(/|$|\?|#)",
    re.IGNORECASE,
)


def _path(url: str) -> str:
    parsed = urlparse(url or "")
    path = parsed.path or "/"
    return path if path.startswith("/") else "/" + path


def _is_root(path: str) -> bool:
    return path.strip("/") == "" or path.strip("/").lower() in {"index.html", "index.php", "da", "en"}


def classify_page(signals: ScrapedSignals) -> PageType:
    """Return the page type for a signal set. Total: defaults to HOME."""
    path = _path(signals.url)
    structure = signals.structure
    page = signals.page

    has_checkout_marker = structure.has_checkout_form or page.checkout_indicator_count > 0
    if has_checkout_marker and CHECKOUT_URL.search(path):
        return PageType.CHECKOUT

    if CART_URL.search(path):
        return PageType.CART

    if (
        structure.has_add_to_cart
        and (structure.has_product_gallery or page.has_product_schema)
        and page.product_count < COLLECTION_MIN_PRODUCTS
    ):
        return PageType.PRODUCT
    if PRODUCT_URL.search(path):
        return PageType.PRODUCT

    if (
        page.product_count >= COLLECTION_MIN_PRODUCTS
        or (structure.has_filters and page.product_count >= FILTERED_COLLECTION_MIN_PRODUCTS)
        or COLLECTION_URL.search(path)
    ):
        return PageType.COLLECTION

    if _is_root(path):
        return PageType.HOME

    if structure.has_hero and signals.ctas:
        return PageType.LANDING

    return PageType.HOME
