"""
The nine category analyzers, in report order.
"""

from analyzer.checks import above_fold, content, conversion, cta, design, friction, navigation, performance, trust

ALL_CATEGORIES = [
    above_fold.CATEGORY,
    cta.CATEGORY,
    trust.CATEGORY,
    content.CATEGORY,
    navigation.CATEGORY,
    design.CATEGORY,
    performance.CATEGORY,
    conversion.CATEGORY,
    friction.CATEGORY,
]

__all__ = [
    "ALL_CATEGORIES",
    "above_fold",
    "content",
    "conversion",
    "cta",
    "design",
    "friction",
    "navigation",
    "performance",
    "trust",
]
