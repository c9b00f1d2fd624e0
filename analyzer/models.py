"""
Result model for CRO Auditor

Immutable value types produced by the audit: findings, categories, the
synthesized report sections and the technical/security health block.
"""

from enum import Enum
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


FindingType = Literal["success", "warning", "error"]
Impact = Literal["high", "medium", "low"]


class PageType(str, Enum):
    HOME = "home"
    PRODUCT = "product"
    COLLECTION = "collection"
    CART = "cart"
    CHECKOUT = "checkout"
    LANDING = "landing"


COMMERCE_PAGE_TYPES = frozenset(
    {PageType.PRODUCT, PageType.COLLECTION, PageType.CART, PageType.CHECKOUT}
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Finding(_Frozen):
    """One observation emitted by a single rule check."""

    type: FindingType
    title: str
    description: str
    recommendation: str = ""
    impact: Impact
    principle: str = ""

    @model_validator(mode="after")
    def _recommendation_matches_type(self):
        if self.type == "success" and self.recommendation:
            raise ValueError("success findings carry no recommendation")
        if self.type != "success" and not self.recommendation:
            raise ValueError(f"{self.type} finding '{self.title}' needs a recommendation")
        return self


class Category(_Frozen):
    key: str
    name: str
    icon: str
    score: int = Field(ge=0, le=100)
    findings: List[Finding] = Field(default_factory=list)


class QuickWin(_Frozen):
    title: str
    description: str
    estimated_impact: str


class ABTestIdea(_Frozen):
    id: int
    title: str
    hypothesis: str
    variant_a: str
    variant_b: str
    metric: str
    expected_impact: Impact
    category: str
    page_types: List[str]


class BenchmarkComparison(_Frozen):
    metric: str
    your_value: Union[int, float, str]
    industry_avg: Union[int, float, str]
    top_performers: Union[int, float, str]
    status: Literal["above", "at", "below"]
    recommendation: Optional[str] = None


class Benchmark(_Frozen):
    overall_position: str
    comparisons: List[BenchmarkComparison]
    industry_context: str


class SecurityCheck(_Frozen):
    category: str
    label: str
    status: Literal["pass", "fail", "warning", "info"]
    value: str
    risk: Literal["none", "low", "medium", "high"] = "none"
    detail: Optional[str] = None
    how_to_fix: Optional[str] = None


class CoreWebVital(_Frozen):
    metric: str
    value: str
    rating: Literal["good", "needs-improvement", "poor"]
    threshold: str


class AuditItem(_Frozen):
    title: str
    display_value: Optional[str] = None
    description: str = ""


class TechnicalHealth(_Frozen):
    performance_score: Optional[int] = None
    accessibility_score: Optional[int] = None
    best_practices_score: Optional[int] = None
    seo_score: Optional[int] = None
    core_web_vitals: List[CoreWebVital] = Field(default_factory=list)
    checks: List[SecurityCheck] = Field(default_factory=list)
    groups: Dict[str, List[SecurityCheck]] = Field(default_factory=dict)
    opportunities: List[AuditItem] = Field(default_factory=list)
    diagnostics: List[AuditItem] = Field(default_factory=list)
    passed_count: int = 0
    score: int = 0
    risk_level: Literal["low", "medium", "high", "critical"] = "low"


class AnalysisResult(_Frozen):
    overall_score: int = Field(ge=0, le=100)
    page_type: PageType
    summary: str
    categories: List[Category]
    quick_wins: List[QuickWin] = Field(default_factory=list)
    prioritized_actions: List[str] = Field(default_factory=list)
    ab_test_ideas: List[ABTestIdea] = Field(default_factory=list)
    benchmark: Benchmark
    technical_health: Optional[TechnicalHealth] = None
