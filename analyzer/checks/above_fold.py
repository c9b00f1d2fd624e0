"""
Above-the-fold checks: headline, meta description, hero and value proposition.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, quote, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData
from analyzer.text_index import TEXT_PATTERNS

BENEFIT_PATTERN = dict(TEXT_PATTERNS)["benefit"]

META_DESCRIPTION_MIN = 100
META_DESCRIPTION_MAX = 160


def check_h1(ctx: CheckContext) -> Finding:
    h1s = [h for h in ctx.signals.headings if h.tag.lower() == "h1"]

    if not h1s:
        return error(
            "No H1 headline",
            "The page has no H1, so visitors and search engines get no single statement of what is on offer.",
            "Add one H1 above the fold that states the main benefit in a single line.",
            "high",
            "Clarity",
        )

    if len(h1s) > 1:
        return warning(
            "Multiple H1 headlines",
            f"The page has {len(h1s)} H1 elements, which splits attention between competing messages.",
            "Keep one H1 for the core promise and demote the rest to H2.",
            "medium",
            "Visual Hierarchy",
        )

    headline = quote(h1s[0].text)
    if BENEFIT_PATTERN.search(h1s[0].text):
        return success(
            "Benefit-driven headline",
            f'The H1 "{headline}" communicates a concrete benefit.',
            "high",
            "Value Proposition",
        )

    return warning(
        "Headline lacks a clear benefit",
        f'The H1 "{headline}" describes the page but does not say what the visitor gains.',
        "Rewrite the H1 around the outcome, for example the money or time the visitor saves.",
        "high",
        "Value Proposition",
    )


def check_meta_description(ctx: CheckContext) -> Finding:
    meta = (ctx.signals.meta_description or ctx.signals.meta_tags.get("description", "")).strip()
    length = len(meta)

    if not meta:
        return error(
            "Missing meta description",
            "Search results will show a random text snippet instead of a written pitch.",
            f"Write a {META_DESCRIPTION_MIN}-{META_DESCRIPTION_MAX} character meta description with the main benefit and a call to action.",
            "medium",
            "Clarity",
        )

    if length < META_DESCRIPTION_MIN or length > META_DESCRIPTION_MAX:
        return warning(
            "Meta description length is off",
            f"The meta description is {length} characters; search engines show roughly {META_DESCRIPTION_MIN}-{META_DESCRIPTION_MAX}.",
            "Adjust the meta description so the full pitch fits in the search snippet.",
            "low",
            "Clarity",
        )

    return success(
        "Meta description well sized",
        f"The meta description is {length} characters and fits the search snippet.",
        "low",
        "Clarity",
    )


def check_hero(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_hero:
        return success(
            "Hero section present",
            "A hero section frames the first screen around one message.",
            "medium",
            "Visual Hierarchy",
        )
    return warning(
        "No hero section",
        "The first screen has no clear hero area, so the main message competes with everything else.",
        "Introduce a hero with headline, supporting line, visual and one primary CTA.",
        "medium",
        "Visual Hierarchy",
    )


def check_value_proposition(ctx: CheckContext) -> Finding:
    usps = ctx.copy_fragments("usps", "usp")
    benefits = ctx.copy_fragments("benefit_statements", "benefit")
    strength = len(usps) + len(benefits)

    if strength >= 2:
        return success(
            "Clear value proposition",
            f"Found {len(usps)} unique selling point(s) and {len(benefits)} benefit statement(s).",
            "high",
            "Value Proposition",
        )
    return warning(
        "Value proposition is unclear",
        "The copy does not make it clear why a visitor should choose this offer over the alternatives.",
        "Add 3-4 short value points (delivery, returns, price, quality) directly under the headline.",
        "high",
        "Value Proposition",
    )


CATEGORY = CategoryDefinition(
    key="above-the-fold",
    name=CATEGORY_META["above-the-fold"]["name"],
    icon=CATEGORY_META["above-the-fold"]["icon"],
    checks=[
        Check("h1", check_h1),
        Check("meta_description", check_meta_description),
        Check("hero", check_hero, page_types=only(PageType.HOME, PageType.LANDING)),
        Check("value_proposition", check_value_proposition, page_types=only(PageType.HOME, PageType.LANDING)),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
