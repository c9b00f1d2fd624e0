"""
Mobile and performance checks.

Lighthouse metrics are used when PageSpeed data is available; otherwise the
load time measured during scraping is banded instead. The viewport meta tag
is always checked.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData

LIGHTHOUSE_GOOD = 90
LIGHTHOUSE_FAIR = 50
LCP_GOOD_MS = 2500
LCP_POOR_MS = 4000
CLS_POOR = 0.25
LOAD_GOOD_MS = 2000
LOAD_FAIR_MS = 4000


def _has_speed(ctx: CheckContext) -> bool:
    return ctx.speed is not None


def _measured_load_time(ctx: CheckContext) -> bool:
    return ctx.speed is None and ctx.signals.performance.load_time_ms > 0


def _has_lcp(ctx: CheckContext) -> bool:
    return ctx.speed is not None and ctx.speed.lcp is not None


def _has_cls(ctx: CheckContext) -> bool:
    return ctx.speed is not None and ctx.speed.cls is not None


def check_lighthouse_score(ctx: CheckContext) -> Finding:
    score = ctx.speed.performance_score
    strategy = ctx.speed.strategy

    if score is None:
        return warning(
            "Lighthouse score unavailable",
            f"PageSpeed returned no {strategy} performance score.",
            "Re-run PageSpeed Insights and check that the page is reachable for Google's crawler.",
            "medium",
            "Doherty Threshold",
        )

    if score >= LIGHTHOUSE_GOOD:
        return success(
            "Fast page",
            f"The {strategy} Lighthouse performance score is {score}/100.",
            "high",
            "Doherty Threshold",
        )

    if score >= LIGHTHOUSE_FAIR:
        return warning(
            "Page speed needs improvement",
            f"The {strategy} Lighthouse performance score is {score}/100.",
            "Compress images, defer non-critical scripts and remove unused CSS/JS.",
            "high",
            "Doherty Threshold",
        )

    return error(
        "Slow page",
        f"The {strategy} Lighthouse performance score is only {score}/100; many visitors leave before the page loads.",
        "Prioritise the PageSpeed opportunities: image formats, render-blocking resources and JavaScript size.",
        "high",
        "Doherty Threshold",
    )


def check_lcp(ctx: CheckContext) -> Finding:
    lcp = ctx.speed.lcp
    seconds = lcp / 1000

    if lcp <= LCP_GOOD_MS:
        return success(
            "Good Largest Contentful Paint",
            f"The main content renders in {seconds:.1f}s.",
            "high",
            "Doherty Threshold",
        )

    if lcp <= LCP_POOR_MS:
        return warning(
            "Largest Contentful Paint needs improvement",
            f"The main content renders in {seconds:.1f}s; under 2.5s is considered good.",
            "Preload the hero image, serve it in WebP/AVIF and cut server response time.",
            "high",
            "Doherty Threshold",
        )

    return error(
        "Poor Largest Contentful Paint",
        f"The main content takes {seconds:.1f}s to render.",
        "Optimise the largest above-the-fold element: smaller image, preload, CDN and caching.",
        "high",
        "Doherty Threshold",
    )


def check_cls(ctx: CheckContext) -> Finding:
    cls = ctx.speed.cls

    if cls > CLS_POOR:
        return warning(
            "Layout shifts while loading",
            f"Cumulative Layout Shift is {cls:.2f}; elements jump while visitors try to click.",
            "Reserve space for images, ads and embeds with explicit width and height.",
            "medium",
            "Jakob's Law",
        )

    return success(
        "Stable layout",
        f"Cumulative Layout Shift is {cls:.2f}.",
        "medium",
        "Jakob's Law",
    )


def check_load_time(ctx: CheckContext) -> Finding:
    load_ms = ctx.signals.performance.load_time_ms
    seconds = load_ms / 1000

    if load_ms < LOAD_GOOD_MS:
        return success(
            "Fast load time",
            f"The page loaded in {seconds:.1f}s during the audit.",
            "high",
            "Doherty Threshold",
        )

    if load_ms < LOAD_FAIR_MS:
        return warning(
            "Moderate load time",
            f"The page loaded in {seconds:.1f}s during the audit; under 2s keeps visitors engaged.",
            "Compress images, enable caching and defer scripts that are not needed for the first screen.",
            "high",
            "Doherty Threshold",
        )

    return error(
        "Slow load time",
        f"The page took {seconds:.1f}s to load during the audit.",
        "Audit the page with PageSpeed Insights and fix the largest resources first.",
        "high",
        "Doherty Threshold",
    )


def check_viewport_meta(ctx: CheckContext) -> Finding:
    if ctx.signals.meta_tags.get("viewport"):
        return success(
            "Responsive viewport",
            "The viewport meta tag lets the layout adapt to mobile screens.",
            "high",
            "Mobile First",
        )
    return error(
        "Missing viewport meta tag",
        "Without a viewport meta tag mobile browsers render a zoomed-out desktop layout.",
        'Add <meta name="viewport" content="width=device-width, initial-scale=1">.',
        "high",
        "Mobile First",
    )


CATEGORY = CategoryDefinition(
    key="mobile",
    name=CATEGORY_META["mobile"]["name"],
    icon=CATEGORY_META["mobile"]["icon"],
    checks=[
        Check("lighthouse_score", check_lighthouse_score, requires=_has_speed),
        Check("lcp", check_lcp, requires=_has_lcp),
        Check("cls", check_cls, requires=_has_cls),
        Check("load_time", check_load_time, requires=_measured_load_time),
        Check("viewport_meta", check_viewport_meta),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
