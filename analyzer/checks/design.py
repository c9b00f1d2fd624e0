"""
Visual design and UX checks.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData

MIN_IMAGES = 3
MIN_SECTIONS = 2
MAX_SECTIONS = 15


def check_image_count(ctx: CheckContext) -> Finding:
    count = len(ctx.signals.images)

    if count == 0:
        return error(
            "No images",
            "The page is text only, which makes it harder to grasp the offer at a glance.",
            "Add product or context imagery that shows the offer in use.",
            "medium",
            "Visual Hierarchy",
        )

    if count < MIN_IMAGES:
        return warning(
            "Few images",
            f"Only {count} image(s) support the copy.",
            "Add images that show the product, the outcome or real customers.",
            "low",
            "Visual Hierarchy",
        )

    return success(
        "Visual support for the copy",
        f"{count} images support the copy.",
        "low",
        "Visual Hierarchy",
    )


def check_video(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_video:
        return success(
            "Video content",
            "A video lets visitors see the offer in action.",
            "low",
            "Benefit Framing",
        )
    return warning(
        "No video content",
        "There is no video showing the product or service in use.",
        "Consider a short (30-90s) demo or explainer video near the top of the page.",
        "low",
        "Benefit Framing",
    )


def check_section_density(ctx: CheckContext) -> Finding:
    sections = ctx.signals.structure.section_count

    if sections < MIN_SECTIONS:
        return warning(
            "Little visual structure",
            f"The page is split into {sections} section(s), so content runs together.",
            "Break the page into distinct sections with clear headings and whitespace.",
            "medium",
            "Cognitive Load",
        )

    if sections > MAX_SECTIONS:
        return warning(
            "Page feels crowded",
            f"{sections} sections compete for attention on one page.",
            "Merge or remove sections that do not move the visitor toward the primary action.",
            "low",
            "Cognitive Load",
        )

    return success(
        "Balanced page structure",
        f"{sections} sections give the page a clear rhythm.",
        "medium",
        "Cognitive Load",
    )


def check_og_image(ctx: CheckContext) -> Finding:
    if ctx.signals.meta_tags.get("og:image"):
        return success(
            "Open Graph image set",
            "Shared links show a chosen preview image.",
            "low",
            "Visual Hierarchy",
        )
    return warning(
        "No Open Graph image",
        "Links shared on social media show a random or empty preview.",
        "Add an og:image meta tag with a 1200x630 image of the offer.",
        "low",
        "Visual Hierarchy",
    )


def check_product_gallery(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_product_gallery:
        return success(
            "Product gallery",
            "Multiple product images let shoppers inspect the product before buying.",
            "high",
            "Trust",
        )
    return error(
        "No product gallery",
        "Shoppers cannot see the product from several angles or in use.",
        "Add a gallery with 4-8 images including close-ups, scale and in-use shots.",
        "high",
        "Trust",
    )


CATEGORY = CategoryDefinition(
    key="design",
    name=CATEGORY_META["design"]["name"],
    icon=CATEGORY_META["design"]["icon"],
    checks=[
        Check("image_count", check_image_count),
        Check("video", check_video),
        Check("section_density", check_section_density),
        Check("og_image", check_og_image),
        Check("product_gallery", check_product_gallery, page_types=only(PageType.PRODUCT)),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
