"""
Content and copywriting checks: headings, title, alt text, benefits and USPs.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData

TITLE_MIN = 30
TITLE_MAX = 60
ALT_GOOD_RATIO = 0.9
ALT_FAIR_RATIO = 0.6
USP_TARGET = 3


def check_heading_hierarchy(ctx: CheckContext) -> Finding:
    headings = ctx.signals.headings
    h2_count = sum(1 for h in headings if h.tag.lower() == "h2")

    if not headings:
        return error(
            "No heading structure",
            "The page has no headings, so scanning visitors cannot find their way through the content.",
            "Structure the copy with one H1 and descriptive H2/H3 subheadings.",
            "medium",
            "Cognitive Load",
        )

    if h2_count == 0:
        return warning(
            "No H2 subheadings",
            f"The page has {len(headings)} heading(s) but no H2 sections to break up the content.",
            "Add H2 subheadings for each content block so the page can be scanned.",
            "medium",
            "Cognitive Load",
        )

    return success(
        "Scannable heading structure",
        f"{len(headings)} headings including {h2_count} H2 section(s) make the page easy to scan.",
        "medium",
        "Cognitive Load",
    )


def check_title_length(ctx: CheckContext) -> Finding:
    title = ctx.signals.title.strip()
    length = len(title)

    if not title:
        return error(
            "Missing page title",
            "The page has no <title>, which hurts search visibility and tab recognition.",
            f"Write a {TITLE_MIN}-{TITLE_MAX} character title with the primary keyword and benefit.",
            "medium",
            "Clarity",
        )

    if length < TITLE_MIN or length > TITLE_MAX:
        return warning(
            "Page title length is off",
            f"The title is {length} characters; {TITLE_MIN}-{TITLE_MAX} is the range search engines display fully.",
            "Rewrite the title to fit the recommended length without losing the main keyword.",
            "low",
            "Clarity",
        )

    return success(
        "Page title well sized",
        f"The title is {length} characters and displays fully in search results.",
        "low",
        "Clarity",
    )


def check_alt_coverage(ctx: CheckContext) -> Finding:
    images = ctx.signals.images
    if not images:
        return success(
            "No images need alt text",
            "There are no images on the page that require alternative text.",
            "low",
            "Accessibility",
        )

    with_alt = sum(1 for i in images if i.has_alt)
    ratio = with_alt / len(images)
    description = f"{with_alt} of {len(images)} images ({ratio:.0%}) have alt text."

    if ratio >= ALT_GOOD_RATIO:
        return success("Images described with alt text", description, "medium", "Accessibility")

    if ratio >= ALT_FAIR_RATIO:
        return warning(
            "Some images lack alt text",
            description,
            "Add descriptive alt text to the remaining images, especially product and hero images.",
            "medium",
            "Accessibility",
        )

    return error(
        "Most images lack alt text",
        description,
        "Describe every meaningful image with alt text; mark decorative images with an empty alt.",
        "medium",
        "Accessibility",
    )


def check_benefits_vs_features(ctx: CheckContext) -> Finding:
    benefits = len(ctx.copy_fragments("benefit_statements", "benefit"))
    features = len(ctx.copy_fragments("feature_statements", "feature"))

    if benefits == 0:
        return warning(
            "No benefit-oriented copy",
            f"The copy contains {features} feature statement(s) but no sentences framed as benefits.",
            "Translate each key feature into what it means for the customer ('so you can ...').",
            "high",
            "Benefit Framing",
        )

    if benefits < features:
        return warning(
            "Copy leans on features",
            f"Features ({features}) outnumber benefits ({benefits}) in the copy.",
            "Lead with outcomes and move specifications lower on the page.",
            "medium",
            "Benefit Framing",
        )

    return success(
        "Benefit-led copy",
        f"Benefits ({benefits}) are given at least as much room as features ({features}).",
        "medium",
        "Benefit Framing",
    )


def check_usp_count(ctx: CheckContext) -> Finding:
    usps = ctx.copy_fragments("usps", "usp")
    count = len(usps)

    if count >= USP_TARGET:
        return success(
            "Clear unique selling points",
            f"{count} unique selling points are communicated.",
            "medium",
            "Value Proposition",
        )

    if count > 0:
        return warning(
            "Few unique selling points",
            f"Only {count} unique selling point(s) were found.",
            f"Highlight at least {USP_TARGET} USPs such as delivery time, returns and price guarantees.",
            "low",
            "Value Proposition",
        )

    return error(
        "No unique selling points",
        "The copy never says what makes this offer different.",
        "Add a USP bar (free shipping, fast delivery, easy returns) near the top of the page.",
        "medium",
        "Value Proposition",
    )


CATEGORY = CategoryDefinition(
    key="content",
    name=CATEGORY_META["content"]["name"],
    icon=CATEGORY_META["content"]["icon"],
    checks=[
        Check("heading_hierarchy", check_heading_hierarchy),
        Check("title_length", check_title_length),
        Check("alt_coverage", check_alt_coverage),
        Check("benefits_vs_features", check_benefits_vs_features),
        Check("usp_count", check_usp_count),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
