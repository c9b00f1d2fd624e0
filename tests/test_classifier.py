"""Tests for page type classification."""

from analyzer.classifier import classify_page
from analyzer.models import PageType
from analyzer.signals import CTA, PageSignals, StructuralFlags


class TestPrecedence:
    def test_checkout_wins_over_product_markers(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/checkout",
            structure=StructuralFlags(has_checkout_form=True, has_product_gallery=True, has_add_to_cart=True),
            page=PageSignals(has_product_schema=True, checkout_indicator_count=2),
        )
        assert classify_page(signals) == PageType.CHECKOUT

    def test_shopify_checkouts_path(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/checkouts/cn/abc123",
            structure=StructuralFlags(has_checkout_form=True),
            page=PageSignals(checkout_indicator_count=3),
        )
        assert classify_page(signals) == PageType.CHECKOUT

    def test_checkout_url_without_checkout_markers_is_not_checkout(self, make_signals):
        signals = make_signals(url="https://shop.example.com/checkout")
        assert classify_page(signals) != PageType.CHECKOUT

    def test_cart_url(self, make_signals):
        assert classify_page(make_signals(url="https://shop.example.com/cart")) == PageType.CART

    def test_cart_beats_product_dom(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/basket/",
            structure=StructuralFlags(has_add_to_cart=True, has_product_gallery=True),
        )
        assert classify_page(signals) == PageType.CART


class TestProduct:
    def test_product_from_dom_affordances(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/sommer-sko-blaa",
            structure=StructuralFlags(has_add_to_cart=True, has_product_gallery=True),
            page=PageSignals(product_count=1),
        )
        assert classify_page(signals) == PageType.PRODUCT

    def test_product_from_url(self, make_signals):
        assert classify_page(make_signals(url="https://shop.example.com/products/blue-shoe")) == PageType.PRODUCT

    def test_dense_grid_with_add_to_cart_is_collection(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/sale",
            structure=StructuralFlags(has_add_to_cart=True, has_product_gallery=True),
            page=PageSignals(product_count=24),
        )
        assert classify_page(signals) == PageType.COLLECTION


class TestCollection:
    def test_product_count(self, make_signals):
        signals = make_signals(url="https://shop.example.com/sale", page=PageSignals(product_count=4))
        assert classify_page(signals) == PageType.COLLECTION

    def test_filters_lower_the_threshold(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/sale",
            structure=StructuralFlags(has_filters=True),
            page=PageSignals(product_count=2),
        )
        assert classify_page(signals) == PageType.COLLECTION

    def test_collection_url(self, make_signals):
        assert classify_page(make_signals(url="https://shop.example.com/collections/summer")) == PageType.COLLECTION


class TestHomeAndLanding:
    def test_root_is_home(self, make_signals):
        assert classify_page(make_signals(url="https://shop.example.com/")) == PageType.HOME

    def test_language_root_is_home(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/en/",
            structure=StructuralFlags(has_hero=True),
            ctas=[CTA(text="Shop now")],
        )
        assert classify_page(signals) == PageType.HOME

    def test_hero_with_cta_off_root_is_landing(self, make_signals):
        signals = make_signals(
            url="https://shop.example.com/campaign/black-friday",
            structure=StructuralFlags(has_hero=True),
            ctas=[CTA(text="Claim your discount")],
        )
        assert classify_page(signals) == PageType.LANDING

    def test_unknown_page_defaults_to_home(self, make_signals):
        assert classify_page(make_signals(url="https://shop.example.com/about-us")) == PageType.HOME
