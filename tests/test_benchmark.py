"""Tests for the industry benchmark comparison."""

import pytest

from analyzer.benchmark import INDUSTRY_BENCHMARKS, build_benchmark, classify
from analyzer.models import Category, PageType
from analyzer.signals import SpeedData


@pytest.mark.parametrize(
    "value, expected",
    [(88, "above"), (95, "above"), (58, "at"), (87, "at"), (57, "below")],
)
def test_classify_against_cta_reference(value, expected):
    avg, top = INDUSTRY_BENCHMARKS["cta"]
    assert classify(value, avg, top) == expected


class TestBuildBenchmark:
    def test_rows_follow_categories(self):
        categories = [
            Category(key="cta", name="Call to Action", icon="•", score=40),
            Category(key="mobile", name="Mobile & Performance", icon="•", score=92),
            Category(key="unknown", name="Unknown", icon="•", score=10),
        ]
        benchmark = build_benchmark(66, categories, PageType.PRODUCT)

        assert [c.metric for c in benchmark.comparisons] == ["Call to Action", "Mobile & Performance"]
        cta, mobile = benchmark.comparisons
        assert cta.status == "below"
        assert "industry average of 58" in cta.recommendation
        assert mobile.status == "above"
        assert mobile.recommendation is None
        assert "product pages" in benchmark.industry_context

    def test_lighthouse_row_only_with_a_score(self):
        with_score = build_benchmark(50, [], PageType.HOME, SpeedData(performance_score=60))
        assert [c.metric for c in with_score.comparisons] == ["Lighthouse Score"]
        assert with_score.comparisons[0].status == "at"

        without_score = build_benchmark(50, [], PageType.HOME, SpeedData())
        assert without_score.comparisons == []

    def test_position_bands(self):
        assert build_benchmark(95, [], PageType.HOME).overall_position.startswith("Top performer")
        assert build_benchmark(70, [], PageType.HOME).overall_position.startswith("Above average")
        assert build_benchmark(20, [], PageType.HOME).overall_position.startswith("Below average")
