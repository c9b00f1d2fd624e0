"""
Social proof and trust checks.
"""

from typing import Optional

from analyzer.knowledge import CATEGORY_META
from analyzer.models import Category, Finding, PageType
from analyzer.rules import CategoryDefinition, Check, CheckContext, error, only, quote, run_category, success, warning
from analyzer.signals import ScrapedSignals, SpeedData


def _signals_of(ctx: CheckContext, kind: str):
    return [t for t in ctx.signals.trust_signals if t.kind == kind]


def check_trust_badges(ctx: CheckContext) -> Finding:
    badges = _signals_of(ctx, "badge")
    if badges or ctx.signals.structure.has_trust_badges:
        detail = f' such as "{quote(badges[0].description, 50)}"' if badges else ""
        return success(
            "Trust badges shown",
            f"The page displays trust or security badges{detail}.",
            "medium",
            "Trust",
        )
    return warning(
        "No trust badges",
        "No security, payment or certification badges were found.",
        "Show recognised badges (payment methods, e-commerce certification, SSL) near price and CTA.",
        "medium",
        "Trust",
    )


def check_trust_text(ctx: CheckContext) -> Finding:
    texts = _signals_of(ctx, "text")
    if texts:
        return success(
            "Reassuring trust copy",
            f'Trust copy such as "{quote(texts[0].description, 60)}" addresses purchase anxiety.',
            "medium",
            "Trust",
        )
    return warning(
        "No reassuring trust copy",
        "Nothing in the copy mentions secure payment, encryption or safe shopping.",
        "Add short reassurance lines ('Secure payment', 'Free returns') close to the CTA.",
        "medium",
        "Trust",
    )


def check_social_proof(ctx: CheckContext) -> Finding:
    proof = _signals_of(ctx, "social_proof")
    if proof:
        return success(
            "Social proof present",
            f"{len(proof)} social proof element(s) found, e.g. \"{quote(proof[0].description, 60)}\".",
            "high",
            "Social Proof",
        )
    return error(
        "No social proof",
        "The page shows no reviews, ratings or customer counts.",
        "Add star ratings, review counts or a Trustpilot widget near the primary CTA.",
        "high",
        "Social Proof",
    )


def check_authority(ctx: CheckContext) -> Finding:
    authority = _signals_of(ctx, "authority")
    if authority:
        return success(
            "Authority signals present",
            f'Authority cues such as "{quote(authority[0].description, 60)}" borrow credibility.',
            "low",
            "Authority",
        )
    return warning(
        "No authority signals",
        "No press mentions, awards, certifications or expert endorsements were found.",
        "Add an 'As seen in' logo strip, awards or certifications to borrow credibility.",
        "low",
        "Authority",
    )


def check_testimonials(ctx: CheckContext) -> Finding:
    if ctx.signals.structure.has_testimonials:
        return success(
            "Testimonials section",
            "A testimonials or reviews section lets customers speak for the offer.",
            "medium",
            "Social Proof",
        )
    return warning(
        "No testimonials section",
        "There is no section where existing customers describe their experience.",
        "Add 3-5 short testimonials with name, photo and a specific result.",
        "medium",
        "Social Proof",
    )


CATEGORY = CategoryDefinition(
    key="social-proof",
    name=CATEGORY_META["social-proof"]["name"],
    icon=CATEGORY_META["social-proof"]["icon"],
    checks=[
        Check("trust_badges", check_trust_badges),
        Check("trust_text", check_trust_text),
        Check("social_proof", check_social_proof),
        Check("authority", check_authority),
        Check(
            "testimonials",
            check_testimonials,
            page_types=only(PageType.HOME, PageType.PRODUCT, PageType.LANDING),
        ),
    ],
)


def analyze(signals: ScrapedSignals, page_type: PageType, speed: Optional[SpeedData] = None) -> Category:
    return run_category(CATEGORY, CheckContext.build(signals, page_type, speed))
