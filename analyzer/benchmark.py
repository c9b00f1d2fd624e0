"""
Industry benchmark comparison.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from analyzer.models import Benchmark, BenchmarkComparison, Category, PageType
from analyzer.signals import SpeedData


# category key -> (industry average, top performers)
INDUSTRY_BENCHMARKS: Dict[str, Tuple[int, int]] = {
    "above-the-fold": (62, 85),
    "cta": (58, 88),
    "social-proof": (55, 86),
    "content": (60, 84),
    "navigation": (65, 88),
    "design": (63, 87),
    "mobile": (54, 90),
    "conversion": (52, 83),
    "friction": (57, 85),
}

LIGHTHOUSE_BENCHMARK: Tuple[int, int] = (52, 92)

INDUSTRY_CONTEXT: Dict[PageType, str] = {
    PageType.HOME: "Compared with e-commerce and lead-generation front pages, where the typical visitor decides within 5 seconds whether to stay.",
    PageType.PRODUCT: "Compared with e-commerce product pages, where average add-to-cart rates sit around 7-10%.",
    PageType.COLLECTION: "Compared with category and listing pages, where filtering and product density drive click-through.",
    PageType.CART: "Compared with shopping carts, where around 70% of sessions are abandoned on average.",
    PageType.CHECKOUT: "Compared with checkout flows, where every extra step or field measurably lowers completion.",
    PageType.LANDING: "Compared with campaign landing pages, where median conversion rates are around 4-6%.",
}


def classify(value: float, industry_avg: float, top_performers: float) -> str:
    if value >= top_performers:
        return "above"
    if value >= industry_avg:
        return "at"
    return "below"


def _compare(metric: str, value: int, industry_avg: int, top: int, advice: str) -> BenchmarkComparison:
    status = classify(value, industry_avg, top)
    return BenchmarkComparison(
        metric=metric,
        your_value=value,
        industry_avg=industry_avg,
        top_performers=top,
        status=status,
        recommendation=advice if status == "below" else None,
    )


def _position(overall: int) -> str:
    averages = [avg for avg, _ in INDUSTRY_BENCHMARKS.values()]
    tops = [top for _, top in INDUSTRY_BENCHMARKS.values()]
    mean_avg = sum(averages) / len(averages)
    mean_top = sum(tops) / len(tops)

    if overall >= mean_top:
        return f"Top performer: your score of {overall} is on par with the best sites (≈{mean_top:.0f})."
    if overall >= mean_avg:
        return f"Above average: your score of {overall} beats the industry average (≈{mean_avg:.0f}) but trails the leaders (≈{mean_top:.0f})."
    return f"Below average: your score of {overall} is under the industry average (≈{mean_avg:.0f})."


def build_benchmark(
    overall: int,
    categories: Sequence[Category],
    page_type: PageType,
    speed: Optional[SpeedData] = None,
) -> Benchmark:
    comparisons: List[BenchmarkComparison] = []
    for category in categories:
        reference = INDUSTRY_BENCHMARKS.get(category.key)
        if reference is None:
            continue
        industry_avg, top = reference
        comparisons.append(
            _compare(
                category.name,
                category.score,
                industry_avg,
                top,
                f"Bring {category.name} up to at least the industry average of {industry_avg}.",
            )
        )

    if speed is not None and speed.performance_score is not None:
        industry_avg, top = LIGHTHOUSE_BENCHMARK
        comparisons.append(
            _compare(
                "Lighthouse Score",
                speed.performance_score,
                industry_avg,
                top,
                "Work through the PageSpeed opportunities to reach at least the industry average.",
            )
        )

    return Benchmark(
        overall_position=_position(overall),
        comparisons=comparisons,
        industry_context=INDUSTRY_CONTEXT[page_type],
    )
