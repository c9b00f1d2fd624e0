"""
Report synthesis: overall score, prioritized actions, quick wins and the
summary sentence, all derived from the nine scored categories.
"""

from typing import List, Sequence, Tuple

from analyzer.models import Category, Finding, QuickWin
from analyzer.scoring import NEUTRAL_SCORE, round_half_up


MAX_PRIORITIZED_ACTIONS = 5
MAX_QUICK_WINS = 5

IMPACT_RANK = {"high": 0, "medium": 1, "low": 2}
TYPE_RANK = {"error": 0, "warning": 1, "success": 2}


def overall_score(categories: Sequence[Category]) -> int:
    if not categories:
        return NEUTRAL_SCORE
    return round_half_up(sum(c.score for c in categories) / len(categories))


def _open_findings(categories: Sequence[Category]) -> List[Finding]:
    return [f for c in categories for f in c.findings if f.type != "success"]


def _priority_key(finding: Finding) -> Tuple[int, int]:
    return IMPACT_RANK[finding.impact], TYPE_RANK[finding.type]


def prioritized_actions(categories: Sequence[Category]) -> List[str]:
    """Top recommendations, high impact first and errors before warnings."""
    candidates = [f for f in _open_findings(categories) if f.recommendation]
    ranked = sorted(candidates, key=_priority_key)
    return [f.recommendation for f in ranked[:MAX_PRIORITIZED_ACTIONS]]


def quick_wins(categories: Sequence[Category]) -> List[QuickWin]:
    wins = []
    for finding in _open_findings(categories):
        if finding.impact != "high":
            continue
        wins.append(
            QuickWin(
                title=finding.title,
                description=finding.recommendation,
                estimated_impact=(
                    "High: fixes a critical conversion blocker"
                    if finding.type == "error"
                    else "Medium-high: removes friction on a key element"
                ),
            )
        )
        if len(wins) == MAX_QUICK_WINS:
            break
    return wins


def _score_label(score: int) -> str:
    if score >= 80:
        return "strong"
    if score >= 60:
        return "solid"
    if score >= 40:
        return "mixed"
    return "weak"


def build_summary(overall: int, categories: Sequence[Category]) -> str:
    error_count = sum(1 for f in _open_findings(categories) if f.type == "error")

    if not categories:
        return f"Overall CRO score {overall}/100 with no categories evaluated."

    # max/min keep the first category on ties, so the sentence is stable
    best = max(categories, key=lambda c: c.score)
    worst = min(categories, key=lambda c: c.score)

    issues = f"{error_count} critical issue" + ("" if error_count == 1 else "s")
    return (
        f"Overall CRO score {overall}/100 ({_score_label(overall)}) with {issues}. "
        f"Strongest area: {best.name} ({best.score}/100). "
        f"Biggest opportunity: {worst.name} ({worst.score}/100)."
    )
