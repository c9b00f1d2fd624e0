"""Tests for A/B test idea selection."""

from analyzer.ab_tests import (
    AB_TEST_POOL,
    IMPACT_BASE,
    KEYWORD_BONUS,
    MAX_AB_TESTS,
    WEAK_CATEGORY_BONUS,
    ABTestTemplate,
    idea_priority,
    select_ab_tests,
)
from analyzer.models import Category, PageType
from analyzer.rules import error


def _template(title, impact="medium", category="cta", page_types=frozenset(PageType), keywords=()):
    return ABTestTemplate(
        title=title,
        hypothesis="h",
        variant_a="a",
        variant_b="b",
        metric="Conversion rate",
        expected_impact=impact,
        category=category,
        page_types=page_types,
        keywords=keywords,
    )


class TestPriority:
    def test_base_only(self):
        assert idea_priority(_template("t", "high"), {"cta": 90}, []) == IMPACT_BASE["high"]

    def test_weak_category_and_keyword_bonus(self):
        template = _template("t", "low", keywords=("headline",))
        priority = idea_priority(template, {"cta": 40}, ["headline lacks a clear benefit"])
        assert priority == IMPACT_BASE["low"] + WEAK_CATEGORY_BONUS + KEYWORD_BONUS


class TestSelection:
    def test_filters_by_page_type_and_numbers_from_one(self):
        pool = [
            _template("Everywhere"),
            _template("Checkout only", page_types=frozenset({PageType.CHECKOUT})),
        ]
        ideas = select_ab_tests(PageType.HOME, [], pool)
        assert [i.title for i in ideas] == ["Everywhere"]
        assert ideas[0].id == 1
        assert ideas[0].page_types == sorted(p.value for p in PageType)

    def test_weak_category_ideas_rank_first(self):
        pool = [_template("Trust idea", "high", category="social-proof"), _template("CTA idea", "medium")]
        categories = [
            Category(key="cta", name="CTA", icon="•", score=20, findings=[error("No CTAs found", "d", "Add one", "high")]),
            Category(key="social-proof", name="Trust", icon="•", score=95),
        ]
        ideas = select_ab_tests(PageType.HOME, categories, pool)
        assert [i.title for i in ideas] == ["CTA idea", "Trust idea"]
        assert [i.id for i in ideas] == [1, 2]

    def test_equal_priority_keeps_pool_order(self):
        pool = [_template("First"), _template("Second"), _template("Third")]
        assert [i.title for i in select_ab_tests(PageType.LANDING, [], pool)] == ["First", "Second", "Third"]

    def test_default_pool_is_capped(self):
        for page_type in PageType:
            ideas = select_ab_tests(page_type, [])
            assert 0 < len(ideas) <= MAX_AB_TESTS
            assert all(page_type.value in idea.page_types for idea in ideas)

    def test_pool_templates_are_well_formed(self):
        assert all(t.page_types for t in AB_TEST_POOL)
        assert all(t.expected_impact in IMPACT_BASE for t in AB_TEST_POOL)
