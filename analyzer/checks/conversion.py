"""
Conversion element checks: price, urgency, newsletter, guarantee,
add-to-cart and checkout progress.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import COMMERCE_PAGE_TYPES, Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, quote, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData


def check_price_visibility(ctx: CheckContext) -> Finding:
    if ctx.signals.page.price_visible or ctx.signals.structure.has_pricing:
        return success(
            "Price is visible",
            "Visitors can see the price without hunting for it.",
            "high",
            "Clarity",
        )
    return error(
        "Price not visible",
        "No price was found on a page where shoppers expect one.",
        "Show the price clearly next to the product name and the buy button.",
        "high",
        "Clarity",
    )


def check_urgency(ctx: CheckContext) -> Finding:
    urgency = ctx.copy_fragments("urgency_elements", "urgency")
    if urgency:
        return success(
            "Urgency cues",
            f'Urgency copy such as "{quote(urgency[0], 60)}" gives a reason to act now.',
            "medium",
            "Scarcity",
        )
    return warning(
        "No urgency cues",
        "Nothing on the page gives visitors a reason to act now rather than later.",
        "Add honest urgency: stock levels, delivery cut-off times or time-limited offers.",
        "medium",
        "Scarcity",
    )


def check_newsletter(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_newsletter:
        return success(
            "Newsletter signup",
            "Visitors who are not ready to buy can still leave their email.",
            "low",
            "Reciprocity",
        )
    return warning(
        "No newsletter signup",
        "Visitors who are not ready to buy leave without a way to stay in touch.",
        "Offer a newsletter signup with an incentive, such as 10% off the first order.",
        "low",
        "Reciprocity",
    )


def check_guarantee(ctx: CheckContext) -> Finding:
    guarantees = ctx.copy_fragments("guarantee_statements", "guarantee")
    if guarantees:
        return success(
            "Guarantee communicated",
            f'Guarantee copy such as "{quote(guarantees[0], 60)}" lowers the risk of buying.',
            "medium",
            "Risk Reversal",
        )
    return warning(
        "No guarantee communicated",
        "The page does not mention a guarantee, return right or refund policy.",
        "State your return policy or satisfaction guarantee close to the CTA.",
        "medium",
        "Risk Reversal",
    )


def check_add_to_cart(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_add_to_cart:
        return success(
            "Add-to-cart button",
            "Shoppers can add the product to their cart directly.",
            "high",
            "Fitts's Law",
        )
    return error(
        "No add-to-cart button",
        "The product page has no visible way to add the product to the cart.",
        "Place a prominent 'Add to cart' button next to price and variant selection.",
        "high",
        "Fitts's Law",
    )


def check_progress_indicator(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_progress_indicator:
        return success(
            "Checkout progress indicator",
            "Shoppers can see how many steps remain before the order is complete.",
            "medium",
            "Goal-Gradient Effect",
        )
    return warning(
        "No checkout progress indicator",
        "Shoppers cannot see how far they are from completing the order.",
        "Add a step indicator (Cart › Delivery › Payment › Confirm) at the top of the checkout.",
        "medium",
        "Goal-Gradient Effect",
    )


CATEGORY = CategoryDefinition(
    key="conversion",
    name=CATEGORY_META["conversion"]["name"],
    icon=CATEGORY_META["conversion"]["icon"],
    checks=[
        Check("price_visibility", check_price_visibility, page_types=COMMERCE_PAGE_TYPES),
        Check("urgency", check_urgency),
        Check("newsletter", check_newsletter),
        Check("guarantee", check_guarantee),
        Check("add_to_cart", check_add_to_cart, page_types=only(PageType.PRODUCT)),
        Check("progress_indicator", check_progress_indicator, page_types=only(PageType.CHECKOUT)),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
