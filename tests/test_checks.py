"""Tests for the nine category analyzers."""

import pytest

from analyzer.checks import ALL_CATEGORIES, above_fold, conversion, cta, friction, navigation, performance, trust
from analyzer.models import PageType
from analyzer.pipeline import analyze_signals
from analyzer.rules import CheckContext, run_category
from analyzer.signals import (
    CTA,
    FormInfo,
    Heading,
    LinkInfo,
    PageSignals,
    PerformanceTiming,
    SpeedData,
    StructuralFlags,
    TrustSignal,
)


def titles(category):
    return [f.title for f in category.findings]


def finding(category, title):
    return next(f for f in category.findings if f.title == title)


# ----------------------------------------------------------------------------
# End to end
# ----------------------------------------------------------------------------

class TestBareProductPage:
    """A Danish product page with a benefit headline but no CTAs or trust."""

    @pytest.fixture
    def result(self, make_signals):
        signals = make_signals(
            url="https://shop.dk/products/sko",
            headings=[Heading(tag="h1", text="Spar 30% på alle sko", is_above_fold=True)],
            performance=PerformanceTiming(load_time_ms=1500),
        )
        return analyze_signals(signals)

    def _category(self, result, key):
        return next(c for c in result.categories if c.key == key)

    def test_page_type(self, result):
        assert result.page_type == PageType.PRODUCT

    def test_benefit_headline_is_recognised(self, result):
        headline = finding(self._category(result, "above-the-fold"), "Benefit-driven headline")
        assert headline.type == "success"

    def test_missing_ctas_is_the_first_cta_finding(self, result):
        first = self._category(result, "cta").findings[0]
        assert first.type == "error"
        assert first.title == "No CTAs found"
        assert first.impact == "high"

    def test_load_time_is_banded_without_speed_data(self, result):
        assert "Fast load time" in titles(self._category(result, "mobile"))

    def test_commerce_checks_fire(self, result):
        conversion_titles = titles(self._category(result, "conversion"))
        assert "Price not visible" in conversion_titles
        assert "No add-to-cart button" in conversion_titles

    def test_missing_social_proof_is_an_error(self, result):
        proof = finding(self._category(result, "social-proof"), "No social proof")
        assert proof.type == "error"

    def test_critical_issues_reach_quick_wins_and_actions(self, result):
        assert "No CTAs found" in [w.title for w in result.quick_wins]
        assert len(result.prioritized_actions) == 5


@pytest.mark.parametrize("page_type", list(PageType))
def test_every_category_scores_every_page_type(make_signals, page_type):
    ctx = CheckContext.build(make_signals(), page_type)
    for definition in ALL_CATEGORIES:
        category = run_category(definition, ctx)
        assert category.key == definition.key
        assert 0 <= category.score <= 100


def test_report_has_nine_categories_in_order(rich_home_signals):
    result = analyze_signals(rich_home_signals)
    assert [c.key for c in result.categories] == [definition.key for definition in ALL_CATEGORIES]
    assert len(result.categories) == 9


# ----------------------------------------------------------------------------
# Above the fold
# ----------------------------------------------------------------------------

class TestAboveFold:
    def test_no_h1(self, make_signals):
        category = above_fold.analyze(make_signals(), PageType.HOME)
        assert finding(category, "No H1 headline").type == "error"

    def test_multiple_h1(self, make_signals):
        signals = make_signals(headings=[Heading(tag="h1", text="One"), Heading(tag="h1", text="Two")])
        assert "Multiple H1 headlines" in titles(above_fold.analyze(signals, PageType.HOME))

    def test_headline_without_benefit(self, make_signals):
        signals = make_signals(headings=[Heading(tag="h1", text="Our collection")])
        assert "Headline lacks a clear benefit" in titles(above_fold.analyze(signals, PageType.HOME))

    def test_meta_description_length(self, make_signals):
        short = above_fold.analyze(make_signals(meta_description="Shoes."), PageType.HOME)
        assert "Meta description length is off" in titles(short)

        good = above_fold.analyze(make_signals(meta_description="x" * 120), PageType.HOME)
        assert "Meta description well sized" in titles(good)

    def test_hero_only_checked_on_home_and_landing(self, make_signals):
        signals = make_signals()
        assert "No hero section" in titles(above_fold.analyze(signals, PageType.LANDING))
        assert "No hero section" not in titles(above_fold.analyze(signals, PageType.PRODUCT))

    def test_value_proposition_from_page_copy(self, rich_home_signals):
        category = above_fold.analyze(rich_home_signals, PageType.HOME)
        assert finding(category, "Clear value proposition").type == "success"


# ----------------------------------------------------------------------------
# CTA
# ----------------------------------------------------------------------------

class TestCTA:
    def test_too_many_ctas(self, make_signals):
        signals = make_signals(ctas=[CTA(text=f"Buy {i}") for i in range(13)])
        assert "Too many competing CTAs" in titles(cta.analyze(signals, PageType.HOME))

    def test_vague_copy(self, make_signals):
        signals = make_signals(ctas=[CTA(text="Click here"), CTA(text="Læs mere")])
        vague = finding(cta.analyze(signals, PageType.HOME), "Vague CTA copy")
        assert vague.type == "warning"
        assert "2 CTA(s)" in vague.description

    def test_action_copy(self, make_signals):
        signals = make_signals(ctas=[CTA(text="Køb nu", is_above_fold=True, is_primary=True)])
        category = cta.analyze(signals, PageType.PRODUCT)
        assert "Action-oriented CTA copy" in titles(category)
        assert "CTA visible above the fold" in titles(category)
        assert "Prominent primary CTA" in titles(category)

    def test_no_primary_among_existing_ctas(self, make_signals):
        signals = make_signals(ctas=[CTA(text="Shop now")])
        assert "CTAs lack visual prominence" in titles(cta.analyze(signals, PageType.HOME))


# ----------------------------------------------------------------------------
# Trust
# ----------------------------------------------------------------------------

class TestTrust:
    def test_signals_present(self, make_signals):
        signals = make_signals(
            trust_signals=[
                TrustSignal(kind="badge", description="e-mærket"),
                TrustSignal(kind="social_proof", description="4.8 stars on Trustpilot"),
            ]
        )
        category = trust.analyze(signals, PageType.HOME)
        assert "Trust badges shown" in titles(category)
        assert "Social proof present" in titles(category)

    def test_testimonials_skipped_on_checkout(self, make_signals):
        category = trust.analyze(make_signals(), PageType.CHECKOUT)
        assert "No testimonials section" not in titles(category)


# ----------------------------------------------------------------------------
# Performance
# ----------------------------------------------------------------------------

class TestPerformance:
    def test_speed_data_replaces_load_time(self, make_signals, fast_speed):
        category = performance.analyze(make_signals(), PageType.HOME, fast_speed)
        category_titles = titles(category)
        assert "Fast page" in category_titles
        assert "Good Largest Contentful Paint" in category_titles
        assert "Stable layout" in category_titles
        assert "Fast load time" not in category_titles

    def test_slow_lighthouse_and_layout_shift(self, make_signals):
        speed = SpeedData(strategy="mobile", performance_score=30, lcp=6000, cls=0.4)
        category = performance.analyze(make_signals(), PageType.HOME, speed)
        assert finding(category, "Slow page").type == "error"
        assert finding(category, "Poor Largest Contentful Paint").type == "error"
        assert "Layout shifts while loading" in titles(category)

    def test_missing_lighthouse_score(self, make_signals):
        speed = SpeedData(strategy="desktop")
        category = performance.analyze(make_signals(), PageType.HOME, speed)
        assert titles(category)[0] == "Lighthouse score unavailable"

    @pytest.mark.parametrize(
        "load_ms, title",
        [(1999, "Fast load time"), (2000, "Moderate load time"), (4000, "Slow load time")],
    )
    def test_load_time_bands(self, make_signals, load_ms, title):
        signals = make_signals(performance=PerformanceTiming(load_time_ms=load_ms))
        assert title in titles(performance.analyze(signals, PageType.HOME))

    def test_unmeasured_load_time_is_not_scored(self, make_signals):
        signals = make_signals(performance=PerformanceTiming())
        category_titles = titles(performance.analyze(signals, PageType.HOME))
        assert not any("load time" in t.lower() for t in category_titles)

    def test_viewport_meta(self, make_signals):
        signals = make_signals(meta_tags={"viewport": "width=device-width"})
        assert "Responsive viewport" in titles(performance.analyze(signals, PageType.HOME))
        assert "Missing viewport meta tag" in titles(performance.analyze(make_signals(), PageType.HOME))


# ----------------------------------------------------------------------------
# Conversion
# ----------------------------------------------------------------------------

class TestConversion:
    def test_price_only_checked_on_commerce_pages(self, make_signals):
        signals = make_signals()
        assert "Price not visible" not in titles(conversion.analyze(signals, PageType.HOME))
        assert "Price not visible" in titles(conversion.analyze(signals, PageType.COLLECTION))

    def test_price_visible(self, make_signals):
        signals = make_signals(page=PageSignals(price_visible=True))
        assert "Price is visible" in titles(conversion.analyze(signals, PageType.PRODUCT))

    def test_checkout_progress(self, make_signals):
        category = conversion.analyze(make_signals(), PageType.CHECKOUT)
        assert "No checkout progress indicator" in titles(category)
        assert "No add-to-cart button" not in titles(category)


# ----------------------------------------------------------------------------
# Navigation
# ----------------------------------------------------------------------------

class TestNavigation:
    def test_missing_nav(self, make_signals):
        assert finding(navigation.analyze(make_signals(), PageType.HOME), "No navigation menu").type == "error"

    def test_overloaded_nav(self, make_signals):
        signals = make_signals(structure=StructuralFlags(has_nav=True, nav_item_count=12))
        assert "Navigation has too many items" in titles(navigation.analyze(signals, PageType.HOME))

    def test_empty_nav(self, make_signals):
        signals = make_signals(structure=StructuralFlags(has_nav=True, nav_item_count=0))
        assert "Navigation has no visible items" in titles(navigation.analyze(signals, PageType.HOME))

    def test_focused_nav(self, make_signals):
        signals = make_signals(structure=StructuralFlags(has_nav=True, nav_item_count=6))
        assert "Focused navigation" in titles(navigation.analyze(signals, PageType.HOME))


# ----------------------------------------------------------------------------
# Friction
# ----------------------------------------------------------------------------

class TestFriction:
    def test_form_checks_skipped_without_forms(self, make_signals):
        category = friction.analyze(make_signals(), PageType.HOME)
        form_titles = {"Short forms", "Forms could be shorter", "Long forms", "Form fields are labelled"}
        assert form_titles.isdisjoint(titles(category))

    @pytest.mark.parametrize(
        "fields, title",
        [(3, "Short forms"), (5, "Forms could be shorter"), (9, "Long forms")],
    )
    def test_form_length(self, make_signals, fields, title):
        signals = make_signals(forms=[FormInfo(field_count=fields, has_labels=True)])
        assert title in titles(friction.analyze(signals, PageType.LANDING))

    @pytest.mark.parametrize(
        "external, title",
        [(2, "Distraction-free checkout"), (5, "External links in checkout"), (6, "Checkout leaks visitors")],
    )
    def test_checkout_exits(self, make_signals, external, title):
        links = [LinkInfo(href=f"https://other{i}.com", is_external=True) for i in range(external)]
        signals = make_signals(links=links)
        assert title in titles(friction.analyze(signals, PageType.CHECKOUT))

    def test_contact_and_privacy_from_copy(self, rich_home_signals):
        category = friction.analyze(rich_home_signals, PageType.HOME)
        assert "Contact information visible" in titles(category)
        assert "No privacy information" in titles(category)
