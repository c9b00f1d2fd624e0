"""
Generic rule engine for the audit categories.

A category is a declarative list of checks. Each applicable check must
return exactly one Finding (success, warning or error); checks whose page
types or data preconditions do not apply are skipped without penalty.
"""

from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional

from analyzer.models import Category, Finding, Impact, PageType
from analyzer.scoring import calc_score
from analyzer.signals import ScrapedSignals, SpeedData
from analyzer.text_index import TextIndex


@dataclass(frozen=True)
class CheckContext:
    signals: ScrapedSignals
    page_type: PageType
    speed: Optional[SpeedData]
    text: TextIndex

    @classmethod
    def build(
        cls,
        signals: ScrapedSignals,
        page_type: PageType,
        speed: Optional[SpeedData] = None,
        text: Optional[TextIndex] = None,
    ) -> "CheckContext":
        return cls(
            signals=signals,
            page_type=page_type,
            speed=speed,
            text=text if text is not None else TextIndex.from_signals(signals),
        )

    def copy_fragments(self, field: str, tag: str) -> List[str]:
        """Extractor-classified copy, falling back to the text index when the producer left it empty."""
        fragments = getattr(self.signals.copy_analysis, field)
        return list(fragments) if fragments else self.text.fragments(tag)


@dataclass(frozen=True)
class Check:
    key: str
    evaluate: Callable[[CheckContext], Finding]
    page_types: Optional[FrozenSet[PageType]] = None
    requires: Optional[Callable[[CheckContext], bool]] = None

    def applies(self, ctx: CheckContext) -> bool:
        if self.page_types is not None and ctx.page_type not in self.page_types:
            return False
        if self.requires is not None and not self.requires(ctx):
            return False
        return True


@dataclass(frozen=True)
class CategoryDefinition:
    key: str
    name: str
    icon: str
    checks: List[Check]


def only(*page_types: PageType) -> FrozenSet[PageType]:
    return frozenset(page_types)


def quote(text: str, limit: int = 80) -> str:
    """Collapse whitespace and shorten page text for use inside a finding."""
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 1] + "…"


def quote_list(items: List[str], limit: int = 3) -> str:
    return ", ".join(f'"{quote(item, 40)}"' for item in items[:limit])


def run_checks(checks: List[Check], ctx: CheckContext) -> List[Finding]:
    findings: List[Finding] = []
    for check in checks:
        if not check.applies(ctx):
            continue
        finding = check.evaluate(ctx)
        if not isinstance(finding, Finding):
            raise TypeError(f"check '{check.key}' returned {type(finding).__name__}, expected Finding")
        findings.append(finding)
    return findings


def run_category(definition: CategoryDefinition, ctx: CheckContext) -> Category:
    findings = run_checks(definition.checks, ctx)
    return Category(
        key=definition.key,
        name=definition.name,
        icon=definition.icon,
        score=calc_score(findings),
        findings=findings,
    )


# ======================
# Finding constructors
# ======================

def success(title: str, description: str, impact: Impact = "medium", principle: str = "") -> Finding:
    return Finding(
        type="success",
        title=title,
        description=description,
        recommendation="",
        impact=impact,
        principle=principle,
    )


def warning(
    title: str, description: str, recommendation: str, impact: Impact = "medium", principle: str = ""
) -> Finding:
    return Finding(
        type="warning",
        title=title,
        description=description,
        recommendation=recommendation,
        impact=impact,
        principle=principle,
    )


def error(
    title: str, description: str, recommendation: str, impact: Impact = "high", principle: str = ""
) -> Finding:
    return Finding(
        type="error",
        title=title,
        description=description,
        recommendation=recommendation,
        impact=impact,
        principle=principle,
    )
