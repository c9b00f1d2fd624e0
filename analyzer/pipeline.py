"""
Audit orchestration.

analyze_signals() is the pure core: classifier -> nine category analyzers ->
synthesis -> benchmark -> technical health. run_audit() wraps it with the
browser scrape and the optional external calls, which run concurrently and
degrade to None independently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from analyzer import ab_tests, benchmark, synthesis
from analyzer.checks import ALL_CATEGORIES
from analyzer.classifier import classify_page
from analyzer.models import AnalysisResult
from analyzer.rules import CheckContext, run_category
from analyzer.security import audit_technical_health
from analyzer.signals import ScrapedSignals, SecurityHeadersData, SpeedData

logger = logging.getLogger(__name__)


@dataclass
class AuditOutcome:
    result: AnalysisResult
    screenshot: Optional[str] = None


def analyze_signals(
    signals: ScrapedSignals,
    desktop_speed: Optional[SpeedData] = None,
    mobile_speed: Optional[SpeedData] = None,
    headers: Optional[SecurityHeadersData] = None,
) -> AnalysisResult:
    """Build the full report for one page. Deterministic for identical input."""
    speed = mobile_speed if mobile_speed is not None else desktop_speed
    page_type = classify_page(signals)
    logger.debug(f"Classified {signals.url} as {page_type.value}")

    # One text index shared by every category
    ctx = CheckContext.build(signals, page_type, speed)
    categories = [run_category(definition, ctx) for definition in ALL_CATEGORIES]

    overall = synthesis.overall_score(categories)
    logger.debug(f"Scored {signals.url}: {overall} ({', '.join(f'{c.key}={c.score}' for c in categories)})")

    return AnalysisResult(
        overall_score=overall,
        page_type=page_type,
        summary=synthesis.build_summary(overall, categories),
        categories=categories,
        quick_wins=synthesis.quick_wins(categories),
        prioritized_actions=synthesis.prioritized_actions(categories),
        ab_test_ideas=ab_tests.select_ab_tests(page_type, categories),
        benchmark=benchmark.build_benchmark(overall, categories, page_type, speed),
        technical_health=audit_technical_health(signals, page_type, speed, headers),
    )


async def _optional(label: str, coro) -> Optional[object]:
    try:
        return await coro
    except Exception as e:
        logger.warning(f"⚠️ {label} unavailable: {e}")
        return None


async def collect_external_data(url: str, include_speed: bool = True):
    """Fetch desktop/mobile PageSpeed and security headers; each may be None."""
    from scraper.external import create_http_client, fetch_pagespeed, fetch_security_headers

    async with create_http_client() as client:
        calls = [_optional("Security headers", fetch_security_headers(client, url))]
        if include_speed:
            calls.append(_optional("PageSpeed (desktop)", fetch_pagespeed(client, url, "desktop")))
            calls.append(_optional("PageSpeed (mobile)", fetch_pagespeed(client, url, "mobile")))
        results = await asyncio.gather(*calls)

    headers = results[0]
    desktop, mobile = (results[1], results[2]) if include_speed else (None, None)
    return desktop, mobile, headers


async def run_audit(
    url: str,
    viewport: str = "desktop",
    include_speed: bool = True,
    mode: str = "rules",
) -> AuditOutcome:
    """
    Scrape a URL, gather external data and analyze it with the rule engine
    (mode="rules") or with Claude (mode="ai").

    A failing external call is logged and treated as missing data; a failing
    scrape propagates.
    """
    from scraper.extractor import scrape_page

    logger.info(f"🔍 Auditing {url} ({viewport}, {mode})")
    scrape, external = await asyncio.gather(
        scrape_page(url, viewport),
        collect_external_data(url, include_speed),
        return_exceptions=True,
    )
    if isinstance(scrape, BaseException):
        raise scrape
    if isinstance(external, BaseException):
        logger.warning(f"⚠️ External data collection failed: {external}")
        external = (None, None, None)

    desktop, mobile, headers = external
    if mode == "ai":
        from analyzer.ai import analyze_with_ai

        result = await analyze_with_ai(scrape.signals, scrape.screenshot, desktop, mobile, headers)
    else:
        result = analyze_signals(scrape.signals, desktop, mobile, headers)
    logger.info(f"✅ Audit complete for {url}: score {result.overall_score} ({result.page_type.value})")
    return AuditOutcome(result=result, screenshot=scrape.screenshot)
