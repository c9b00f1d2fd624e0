"""
Model-backed audit.

Sends the page facts and the above-the-fold screenshot to Claude and turns
the JSON answer into the same AnalysisResult the rule engine produces. The
answer is normalised before validation: unknown categories are dropped,
finding recommendations are made consistent with their type, and any
report section the model leaves out or gets wrong is filled in from the
rule-based synthesis. Technical health always comes from the rule-based
auditor because the model never sees response headers.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from analyzer import ab_tests, benchmark, synthesis
from analyzer.classifier import classify_page
from analyzer.knowledge import CATEGORY_META
from analyzer.models import (
    ABTestIdea,
    AnalysisResult,
    Benchmark,
    Category,
    Finding,
    PageType,
    QuickWin,
)
from analyzer.prompts import get_cro_prompt
from analyzer.scoring import calc_score
from analyzer.security import audit_technical_health
from analyzer.signals import ScrapedSignals, SecurityHeadersData, SpeedData
from utils.parsing.json import repair_and_parse_json

logger = logging.getLogger(__name__)

FINDING_TYPES = ("success", "warning", "error")
IMPACTS = ("high", "medium", "low")


def _clamp_score(value: Any) -> Optional[int]:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return None


def _finding(raw: Dict[str, Any]) -> Optional[Finding]:
    title = str(raw.get("title") or "").strip()
    if not title:
        return None
    kind = raw.get("type") if raw.get("type") in FINDING_TYPES else "warning"
    impact = raw.get("impact") if raw.get("impact") in IMPACTS else "medium"
    recommendation = str(raw.get("recommendation") or "").strip()
    if kind == "success":
        recommendation = ""
    elif not recommendation:
        recommendation = f"Review and improve: {title}"
    return Finding(
        type=kind,
        title=title,
        description=str(raw.get("description") or "").strip(),
        recommendation=recommendation,
        impact=impact,
        principle=str(raw.get("principle") or "").strip(),
    )


def _categories(raw_categories: Any) -> List[Category]:
    by_key: Dict[str, Category] = {}
    for raw in raw_categories if isinstance(raw_categories, list) else []:
        if not isinstance(raw, dict):
            continue
        key = raw.get("key")
        meta = CATEGORY_META.get(key)
        if meta is None or key in by_key:
            logger.debug(f"Skipping model category {key!r}")
            continue
        findings = [
            f for f in (_finding(item) for item in raw.get("findings") or [] if isinstance(item, dict)) if f
        ]
        score = _clamp_score(raw.get("score"))
        by_key[key] = Category(
            key=key,
            name=meta["name"],
            icon=meta["icon"],
            score=score if score is not None else calc_score(findings),
            findings=findings,
        )
    # Report order follows the knowledge base, whatever order the model used
    return [by_key[key] for key in CATEGORY_META if key in by_key]


def _section(label: str, build, fallback):
    try:
        value = build()
    except (ValidationError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f"⚠️ Model {label} unusable, using rule-based version: {e}")
        return fallback()
    return value if value else fallback()


def parse_ai_response(
    response_text: str,
    signals: ScrapedSignals,
    speed: Optional[SpeedData] = None,
    headers: Optional[SecurityHeadersData] = None,
) -> AnalysisResult:
    """
    Convert raw model output into an AnalysisResult.

    Raises:
        ValueError: If the output is not JSON or has no usable categories
    """
    data = repair_and_parse_json(response_text)

    try:
        page_type = PageType(data.get("page_type"))
    except ValueError:
        page_type = classify_page(signals)

    categories = _categories(data.get("categories"))
    if not categories:
        raise ValueError("Model response contained no usable audit categories")

    overall = _clamp_score(data.get("overall_score"))
    if overall is None:
        overall = synthesis.overall_score(categories)

    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = synthesis.build_summary(overall, categories)

    return AnalysisResult(
        overall_score=overall,
        page_type=page_type,
        summary=summary.strip(),
        categories=categories,
        quick_wins=_section(
            "quick wins",
            lambda: [QuickWin.model_validate(w) for w in data.get("quick_wins") or []][: synthesis.MAX_QUICK_WINS],
            lambda: synthesis.quick_wins(categories),
        ),
        prioritized_actions=_section(
            "prioritized actions",
            lambda: [str(a) for a in data.get("prioritized_actions") or [] if str(a).strip()][: synthesis.MAX_PRIORITIZED_ACTIONS],
            lambda: synthesis.prioritized_actions(categories),
        ),
        ab_test_ideas=_section(
            "A/B test ideas",
            lambda: [
                ABTestIdea.model_validate({**idea, "id": i})
                for i, idea in enumerate(data.get("ab_test_ideas") or [], 1)
            ][: ab_tests.MAX_AB_TESTS],
            lambda: ab_tests.select_ab_tests(page_type, categories),
        ),
        benchmark=_section(
            "benchmark",
            lambda: Benchmark.model_validate(data["benchmark"]) if data.get("benchmark") else None,
            lambda: benchmark.build_benchmark(overall, categories, page_type, speed),
        ),
        technical_health=audit_technical_health(signals, page_type, speed, headers),
    )


async def analyze_with_ai(
    signals: ScrapedSignals,
    screenshot: Optional[str] = None,
    desktop_speed: Optional[SpeedData] = None,
    mobile_speed: Optional[SpeedData] = None,
    headers: Optional[SecurityHeadersData] = None,
) -> AnalysisResult:
    """
    Audit one page with Claude.

    Raises:
        anthropic.APIError: If the API call fails after retries
        ValueError: If the response cannot be turned into a report
    """
    from utils.clients.anthropic import call_anthropic_api_with_retry

    speed = mobile_speed if mobile_speed is not None else desktop_speed
    prompt = get_cro_prompt(signals, classify_page(signals))

    logger.info(f"🤖 Analyzing {signals.url} with Claude AI...")
    api_start = time.time()
    # The SDK client is synchronous
    message = await asyncio.to_thread(call_anthropic_api_with_retry, prompt, screenshot)
    logger.info(f"⏱️  Claude API call completed in {time.time() - api_start:.2f}s")

    response_text = message.content[0].text.strip()
    logger.debug(f"📝 Raw response length: {len(response_text)} characters")
    return parse_ai_response(response_text, signals, speed, headers)
