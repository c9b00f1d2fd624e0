"""
Call-to-action checks: count, placement, prominence, copy and repetition.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import (
    CategoryDefinition,
    Check,
    CheckContext,
    error,
    quote,
    quote_list,
    run_category,
    success,
    warning,
)
from analyzer.signals import ScrapedSignals, SpeedData
from analyzer.text_index import CTA_ACTION_PATTERN, CTA_VAGUE_PATTERN

MAX_CTAS_BEFORE_OVERLOAD = 12
LONG_PAGE_SECTIONS = 4


def check_cta_count(ctx: CheckContext) -> Finding:
    count = len(ctx.signals.ctas)

    if count == 0:
        return error(
            "No CTAs found",
            "The page has no buttons or links that invite the visitor to act.",
            "Add a clear primary CTA (for example 'Add to cart' or 'Get started') in the first screen.",
            "high",
            "Clarity",
        )

    if count > MAX_CTAS_BEFORE_OVERLOAD:
        return warning(
            "Too many competing CTAs",
            f"{count} calls to action compete for attention.",
            "Pick one primary action per screen and restyle the others as secondary links.",
            "medium",
            "Hick's Law",
        )

    return success(
        "Focused set of CTAs",
        f"{count} call(s) to action give the visitor clear next steps.",
        "high",
        "Clarity",
    )


def check_above_fold_cta(ctx: CheckContext) -> Finding:
    ctas = ctx.signals.ctas
    above = [c for c in ctas if c.is_above_fold]

    if above:
        return success(
            "CTA visible above the fold",
            f'{len(above)} CTA(s) are visible without scrolling, led by "{quote(above[0].text, 40)}".',
            "high",
            "Fitts's Law",
        )

    description = (
        f"{len(ctas)} CTA(s) exist, but all of them require scrolling."
        if ctas
        else "Visitors see no action to take on the first screen."
    )
    return error(
        "No CTA above the fold",
        description,
        "Place the primary CTA in the first viewport, next to the headline.",
        "high",
        "Fitts's Law",
    )


def check_primary_prominence(ctx: CheckContext) -> Finding:
    ctas = ctx.signals.ctas
    primary = [c for c in ctas if c.is_primary]

    if primary:
        return success(
            "Prominent primary CTA",
            f'"{quote(primary[0].text, 40)}" is large enough to stand out from surrounding content.',
            "high",
            "Von Restorff Effect",
        )

    if ctas:
        return warning(
            "CTAs lack visual prominence",
            "None of the CTAs is large enough to stand out as the primary action.",
            "Give the primary CTA a contrasting colour, at least 44px height and generous padding.",
            "high",
            "Von Restorff Effect",
        )

    return error(
        "No primary CTA",
        "There is no dominant button that tells visitors what to do next.",
        "Design one high-contrast primary button and use it consistently.",
        "high",
        "Von Restorff Effect",
    )


def check_cta_copy(ctx: CheckContext) -> Finding:
    texts = [c.text.strip() for c in ctx.signals.ctas if c.text.strip()]

    if not texts:
        return warning(
            "No CTA copy to evaluate",
            "No call to action carries readable text.",
            "Label every CTA with a verb and an outcome, such as 'Buy now - free delivery'.",
            "medium",
            "Clarity",
        )

    vague = [t for t in texts if CTA_VAGUE_PATTERN.match(t)]
    if vague:
        return warning(
            "Vague CTA copy",
            f"{len(vague)} CTA(s) use generic text such as {quote_list(vague)}.",
            "Replace generic labels with a verb plus the outcome the visitor gets.",
            "medium",
            "Clarity",
        )

    action = [t for t in texts if CTA_ACTION_PATTERN.search(t)]
    if action:
        return success(
            "Action-oriented CTA copy",
            f"{len(action)} of {len(texts)} CTA(s) start from an action verb, e.g. {quote_list(action, 2)}.",
            "medium",
            "Clarity",
        )

    return warning(
        "CTA copy lacks action verbs",
        f"CTA labels such as {quote_list(texts)} do not say what happens on click.",
        "Start CTA labels with an action verb ('Buy', 'Book', 'Get') and name the result.",
        "medium",
        "Clarity",
    )


def check_cta_repetition(ctx: CheckContext) -> Finding:
    ctas = ctx.signals.ctas
    above = any(c.is_above_fold for c in ctas)
    below = any(not c.is_above_fold for c in ctas)

    if above and below:
        return success(
            "CTA repeated down the page",
            "Visitors can act both on the first screen and after reading further down.",
            "low",
            "Fitts's Law",
        )

    if above and ctx.signals.structure.section_count < LONG_PAGE_SECTIONS:
        return success(
            "CTA placement fits page length",
            "The page is short enough that the first-screen CTA stays within reach.",
            "low",
            "Fitts's Law",
        )

    if above:
        return warning(
            "CTA not repeated further down",
            "Visitors who scroll through the content reach the end without a new prompt to act.",
            "Repeat the primary CTA after key content sections and at the bottom of the page.",
            "low",
            "Fitts's Law",
        )

    return warning(
        "No CTA rhythm through the page",
        "There is no CTA on the first screen to echo further down the page.",
        "Place the primary CTA at the top and repeat it after the main content blocks.",
        "low",
        "Fitts's Law",
    )


CATEGORY = CategoryDefinition(
    key="cta",
    name=CATEGORY_META["cta"]["name"],
    icon=CATEGORY_META["cta"]["icon"],
    checks=[
        Check("cta_count", check_cta_count),
        Check("above_fold_cta", check_above_fold_cta),
        Check("primary_prominence", check_primary_prominence),
        Check("cta_copy", check_cta_copy),
        Check("cta_repetition", check_cta_repetition),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
