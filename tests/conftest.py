"""Shared test configuration and fixtures."""

import pytest

from analyzer.signals import (
    CTA,
    Heading,
    PerformanceTiming,
    ScrapedSignals,
    SecurityHeadersData,
    SecuritySignals,
    SpeedData,
    StructuralFlags,
)


def build_signals(**overrides) -> ScrapedSignals:
    """A bare page: nothing detected unless the test says so."""
    data = {
        "url": "https://shop.example.com/",
        "performance": PerformanceTiming(load_time_ms=1500),
    }
    data.update(overrides)
    return ScrapedSignals(**data)


@pytest.fixture
def make_signals():
    return build_signals


@pytest.fixture
def rich_home_signals():
    """A reasonably well built home page."""
    return build_signals(
        title="Nordic Sleep - Better sleep with Danish designed bedding",
        meta_description=(
            "Sleep better tonight with Danish designed duvets and pillows. Free shipping, "
            "30-day returns and a 100-night guarantee."
        ),
        headings=[
            Heading(tag="h1", text="Save 20% on better sleep", is_above_fold=True),
            Heading(tag="h2", text="Why customers love us"),
            Heading(tag="h2", text="Our bestsellers"),
        ],
        ctas=[
            CTA(text="Shop duvets", is_above_fold=True, font_size_px=16, area_px2=9000, is_primary=True),
            CTA(text="Get started", is_above_fold=False, font_size_px=14, area_px2=3000),
        ],
        structure=StructuralFlags(
            has_nav=True,
            has_footer=True,
            has_hero=True,
            has_faq=True,
            has_testimonials=True,
            has_newsletter=True,
            section_count=6,
            nav_item_count=5,
        ),
        meta_tags={"viewport": "width=device-width, initial-scale=1", "og:image": "https://cdn.example.com/og.jpg"},
        text_content=(
            "Free shipping on all orders. 30-day returns on everything. "
            "Over 10,000 happy customers on Trustpilot. Secure payment with Visa and MobilePay. "
            "Contact us at hello@example.com."
        ),
    )


@pytest.fixture
def fast_speed():
    return SpeedData(
        strategy="mobile",
        performance_score=95,
        accessibility_score=92,
        best_practices_score=88,
        seo_score=40,
        lcp=2100,
        fcp=900,
        cls=0.05,
        tbt=150,
        si=2500,
        ttfb=300,
    )


@pytest.fixture
def secure_headers():
    return SecurityHeadersData(
        final_url="https://shop.example.com/",
        status_code=200,
        hsts="max-age=31536000; includeSubDomains",
        csp="default-src 'self'",
        x_frame_options="DENY",
        x_content_type_options="nosniff",
        referrer_policy="strict-origin-when-cross-origin",
        robots_txt="User-agent: *\nDisallow: /admin",
    )


@pytest.fixture
def security_signals():
    return SecuritySignals(
        is_https=True,
        has_privacy_policy_link=True,
        has_cookie_consent=True,
        third_party_script_count=2,
    )


@pytest.fixture
def audit_payload(rich_home_signals, fast_speed, secure_headers, security_signals):
    """A serialized audit as stored by the background task."""
    from analyzer.pipeline import analyze_signals
    from api.models import AuditResponse

    signals = rich_home_signals.model_copy(update={"security": security_signals})
    result = analyze_signals(signals, mobile_speed=fast_speed, headers=secure_headers)
    return AuditResponse(
        url=signals.url,
        viewport="desktop",
        mode="rules",
        analyzed_at="2026-01-15T10:00:00+00:00",
        result=result,
    ).model_dump(mode="json")
