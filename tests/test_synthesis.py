"""Tests for report synthesis: overall score, actions, quick wins, summary."""

from analyzer import synthesis
from analyzer.models import Category
from analyzer.rules import error, success, warning


def category(key, score, findings=(), name=None):
    return Category(key=key, name=name or key.title(), icon="•", score=score, findings=list(findings))


class TestOverallScore:
    def test_mean_of_categories(self):
        categories = [category("a", 70), category("b", 81)]
        assert synthesis.overall_score(categories) == 76  # 75.5 rounds half up

    def test_no_categories_is_neutral(self):
        assert synthesis.overall_score([]) == 50


class TestPrioritizedActions:
    def test_high_impact_errors_first(self):
        categories = [
            category(
                "a",
                40,
                [
                    warning("w-low", "d", "fix w-low", "low"),
                    warning("w-high", "d", "fix w-high", "high"),
                    success("fine", "d", "high"),
                ],
            ),
            category("b", 20, [error("e-high", "d", "fix e-high", "high"), error("e-med", "d", "fix e-med", "medium")]),
        ]
        assert synthesis.prioritized_actions(categories) == ["fix e-high", "fix w-high", "fix e-med", "fix w-low"]

    def test_capped(self):
        findings = [error(f"e{i}", "d", f"fix {i}", "high") for i in range(8)]
        actions = synthesis.prioritized_actions([category("a", 0, findings)])
        assert actions == [f"fix {i}" for i in range(synthesis.MAX_PRIORITIZED_ACTIONS)]


class TestQuickWins:
    def test_only_high_impact_open_findings(self):
        categories = [
            category(
                "a",
                30,
                [
                    error("Broken CTA", "d", "Fix the CTA", "high"),
                    warning("Medium thing", "d", "Tweak", "medium"),
                    warning("Weak headline", "d", "Rewrite headline", "high"),
                    success("Good", "d", "high"),
                ],
            )
        ]
        wins = synthesis.quick_wins(categories)
        assert [w.title for w in wins] == ["Broken CTA", "Weak headline"]
        assert wins[0].description == "Fix the CTA"
        assert wins[0].estimated_impact.startswith("High")
        assert wins[1].estimated_impact.startswith("Medium-high")


class TestSummary:
    def test_mentions_best_and_worst(self):
        categories = [
            category("cta", 30, [error("x", "d", "fix", "high")], name="Call to Action"),
            category("mobile", 90, name="Mobile & Performance"),
        ]
        summary = synthesis.build_summary(60, categories)
        assert "60/100 (solid)" in summary
        assert "1 critical issue." in summary
        assert "Strongest area: Mobile & Performance (90/100)" in summary
        assert "Biggest opportunity: Call to Action (30/100)" in summary

    def test_ties_keep_first_category(self):
        categories = [category("a", 50, name="First"), category("b", 50, name="Second")]
        summary = synthesis.build_summary(50, categories)
        assert "Strongest area: First" in summary
        assert "Biggest opportunity: First" in summary
