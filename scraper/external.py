"""
External data fetchers: PageSpeed Insights and security headers.

Both are optional inputs to the audit; callers treat any exception raised
here as "data unavailable".
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from analyzer.signals import SecurityHeadersData, SpeedAudit, SpeedData
from config import settings

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; CRO-Auditor/1.0)",
}

PSI_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

# Lighthouse audit id -> SpeedData field
LAB_METRICS = {
    "largest-contentful-paint": "lcp",
    "first-contentful-paint": "fcp",
    "total-blocking-time": "tbt",
    "cumulative-layout-shift": "cls",
    "speed-index": "si",
    "server-response-time": "ttfb",
}

MAX_ROBOTS_CHARS = 5000


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=_DEFAULT_HEADERS,
        timeout=settings.EXTERNAL_HTTP_TIMEOUT,
        follow_redirects=True,
    )


# ======================
# PageSpeed Insights
# ======================

def _category_score(categories: Dict[str, Any], key: str) -> Optional[int]:
    score = categories.get(key, {}).get("score")
    return round(score * 100) if score is not None else None


def _audit_item(audit_id: str, audit: Dict[str, Any]) -> SpeedAudit:
    return SpeedAudit(
        title=audit.get("title", audit_id),
        display_value=audit.get("displayValue"),
        description=audit.get("description", ""),
    )


def parse_pagespeed(data: Dict[str, Any], strategy: str) -> SpeedData:
    """Convert a PageSpeed Insights v5 response into SpeedData."""
    lighthouse = data.get("lighthouseResult", {})
    categories = lighthouse.get("categories", {})
    audits = lighthouse.get("audits", {})

    metrics: Dict[str, float] = {}
    for audit_id, field in LAB_METRICS.items():
        value = audits.get(audit_id, {}).get("numericValue")
        if value is not None:
            metrics[field] = round(float(value), 3 if field == "cls" else 0)

    opportunities: List[SpeedAudit] = []
    diagnostics: List[SpeedAudit] = []
    issues: List[SpeedAudit] = []
    for audit_id, audit in audits.items():
        if audit_id in LAB_METRICS:
            continue
        score = audit.get("score")
        details_type = audit.get("details", {}).get("type")
        if score is None or score >= 0.9:
            continue
        if details_type == "opportunity":
            opportunities.append(_audit_item(audit_id, audit))
        elif details_type in ("table", "debugdata", "list"):
            diagnostics.append(_audit_item(audit_id, audit))
        elif score == 0:
            issues.append(_audit_item(audit_id, audit))

    return SpeedData(
        strategy=strategy,
        performance_score=_category_score(categories, "performance"),
        accessibility_score=_category_score(categories, "accessibility"),
        best_practices_score=_category_score(categories, "best-practices"),
        seo_score=_category_score(categories, "seo"),
        opportunities=opportunities,
        diagnostics=diagnostics,
        issues=issues,
        **metrics,
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def fetch_pagespeed(client: httpx.AsyncClient, url: str, strategy: str = "mobile") -> SpeedData:
    """
    Run PageSpeed Insights for one strategy.

    Raises:
        httpx.HTTPStatusError: If the API answers with a 4xx/5xx status
    """
    params: List[tuple] = [("url", url), ("strategy", strategy)]
    params.extend(("category", category) for category in PSI_CATEGORIES)
    if settings.PAGESPEED_API_KEY:
        params.append(("key", settings.PAGESPEED_API_KEY))

    logger.info(f"⚡ Requesting PageSpeed ({strategy}) for {url}")
    response = await client.get(settings.PAGESPEED_API_URL, params=params)
    response.raise_for_status()

    speed = parse_pagespeed(response.json(), strategy)
    logger.info(f"✓ PageSpeed {strategy} performance score: {speed.performance_score}")
    return speed


# ======================
# Security headers
# ======================

def _robots_url(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "/robots.txt", "", ""))


def parse_security_headers(
    headers: httpx.Headers,
    final_url: str,
    status_code: int,
    robots_txt: Optional[str] = None,
) -> SecurityHeadersData:
    return SecurityHeadersData(
        final_url=final_url,
        status_code=status_code,
        hsts=headers.get("strict-transport-security"),
        csp=headers.get("content-security-policy"),
        x_frame_options=headers.get("x-frame-options"),
        x_content_type_options=headers.get("x-content-type-options"),
        referrer_policy=headers.get("referrer-policy"),
        permissions_policy=headers.get("permissions-policy"),
        server=headers.get("server"),
        x_powered_by=headers.get("x-powered-by"),
        robots_txt=robots_txt,
    )


async def _fetch_robots(client: httpx.AsyncClient, url: str) -> Optional[str]:
    try:
        response = await client.get(_robots_url(url))
    except httpx.HTTPError as e:
        logger.warning(f"⚠️ robots.txt fetch failed for {url}: {e}")
        return None
    if response.status_code != 200 or "html" in response.headers.get("content-type", ""):
        return None
    return response.text[:MAX_ROBOTS_CHARS]


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def fetch_security_headers(client: httpx.AsyncClient, url: str) -> SecurityHeadersData:
    """Read the response headers of the page and its robots.txt."""
    logger.info(f"🔒 Fetching security headers for {url}")
    response = await client.get(url)
    final_url = str(response.url)
    robots = await _fetch_robots(client, final_url)
    return parse_security_headers(response.headers, final_url, response.status_code, robots)
