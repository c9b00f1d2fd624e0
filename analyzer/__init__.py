# Analyzer package - CRO audit engine
from .classifier import classify_page
from .models import AnalysisResult, Category, Finding, PageType
from .pipeline import AuditOutcome, analyze_signals, run_audit
from .signals import ScrapedSignals, SecurityHeadersData, SpeedData

__all__ = [
    "classify_page",
    "AnalysisResult",
    "Category",
    "Finding",
    "PageType",
    "AuditOutcome",
    "analyze_signals",
    "run_audit",
    "ScrapedSignals",
    "SecurityHeadersData",
    "SpeedData",
]
