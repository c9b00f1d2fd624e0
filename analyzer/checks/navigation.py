"""
Navigation and structure checks.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData
from config import settings


def check_navigation(ctx: CheckContext) -> Finding:
    structure = ctx.signals.structure
    max_items = settings.NAV_MAX_ITEMS

    if not structure.has_nav:
        return error(
            "No navigation menu",
            "No navigation element was found, so visitors cannot move on if this page is not right for them.",
            "Add a clear top navigation with the main product categories.",
            "high",
            "Jakob's Law",
        )

    if structure.nav_item_count > max_items:
        return warning(
            "Navigation has too many items",
            f"The main navigation shows {structure.nav_item_count} items; more than {max_items} slows decisions.",
            f"Group the menu into at most {max_items} top-level items and move the rest into sub-menus.",
            "medium",
            "Hick's Law",
        )

    if structure.nav_item_count == 0:
        return warning(
            "Navigation has no visible items",
            "A navigation element exists but no top-level links were visible.",
            "Make the main categories visible in the header, or use a clearly labelled menu button.",
            "medium",
            "Jakob's Law",
        )

    return success(
        "Focused navigation",
        f"The main navigation has {structure.nav_item_count} items, within the {max_items}-item guideline.",
        "medium",
        "Hick's Law",
    )


def check_footer(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_footer:
        return success(
            "Footer present",
            "The footer gives visitors a place to find contact, policies and secondary links.",
            "medium",
            "Jakob's Law",
        )
    return warning(
        "No footer",
        "Visitors who scroll to the bottom look for contact details and policies and find nothing.",
        "Add a footer with contact information, delivery/return policies and key links.",
        "medium",
        "Jakob's Law",
    )


def check_breadcrumbs(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_breadcrumbs:
        return success(
            "Breadcrumbs present",
            "Breadcrumbs show where the page sits in the catalogue and offer a way back.",
            "medium",
            "Findability",
        )
    return warning(
        "No breadcrumbs",
        "Visitors arriving from search or ads cannot see where the page sits in the catalogue.",
        "Add breadcrumbs (Home › Category › Product) above the product or listing title.",
        "medium",
        "Findability",
    )


def check_faq(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_faq:
        return success(
            "FAQ answers objections",
            "An FAQ section addresses common questions before they become reasons to leave.",
            "low",
            "Cognitive Load",
        )
    return warning(
        "No FAQ section",
        "Common questions about delivery, returns or usage are left unanswered on the page.",
        "Add a short FAQ covering the 5-7 questions customer service hears most.",
        "low",
        "Cognitive Load",
    )


CATEGORY = CategoryDefinition(
    key="navigation",
    name=CATEGORY_META["navigation"]["name"],
    icon=CATEGORY_META["navigation"]["icon"],
    checks=[
        Check("navigation", check_navigation),
        Check("footer", check_footer),
        Check("breadcrumbs", check_breadcrumbs, page_types=only(PageType.PRODUCT, PageType.COLLECTION)),
        Check("faq", check_faq, page_types=only(PageType.HOME, PageType.PRODUCT, PageType.LANDING)),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
