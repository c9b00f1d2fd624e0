"""
Technical and security health auditor.

A second rule engine, independent of the CRO categories, that turns
security signals from the page, response headers and Lighthouse data into
pass/fail/warning/info checks with a fixed risk tier per check. Checks whose
input was not collected report ``info`` and are left out of the score.
"""

import re
from typing import Dict, List, Optional, Tuple

from analyzer.models import AuditItem, CoreWebVital, PageType, SecurityCheck, TechnicalHealth
from analyzer.scoring import round_half_up
from analyzer.signals import ScrapedSignals, SecurityHeadersData, SecuritySignals, SpeedData, SpeedAudit


JQUERY_MIN_SAFE = (3, 5, 0)
CRITICAL_HIGH_FAILS = 3
ELEVATED_MEDIUM_FAILS = 3

NOT_MEASURED = "Not measured"

_VERSION_IN_HEADER = re.compile(r"\d+(\.\d+)+")


# metric -> (label, good threshold, poor threshold, unit)
CORE_WEB_VITALS: List[Tuple[str, str, float, float, str]] = [
    ("lcp", "Largest Contentful Paint", 2500, 4000, "ms"),
    ("fcp", "First Contentful Paint", 1800, 3000, "ms"),
    ("cls", "Cumulative Layout Shift", 0.1, 0.25, ""),
    ("tbt", "Total Blocking Time", 200, 600, "ms"),
    ("si", "Speed Index", 3400, 5800, "ms"),
    ("ttfb", "Time to First Byte", 800, 1800, "ms"),
]


# ======================
# Check constructors
# ======================

def _check(
    category: str,
    label: str,
    status: str,
    value: str,
    risk: str = "none",
    detail: Optional[str] = None,
    how_to_fix: Optional[str] = None,
) -> SecurityCheck:
    return SecurityCheck(
        category=category,
        label=label,
        status=status,
        value=value,
        risk=risk,
        detail=detail,
        how_to_fix=how_to_fix,
    )


def _not_measured(category: str, label: str, detail: str) -> SecurityCheck:
    return _check(category, label, "info", NOT_MEASURED, detail=detail)


def _header_check(
    headers: Optional[SecurityHeadersData],
    label: str,
    value: Optional[str],
    risk: str,
    how_to_fix: str,
    category: str = "Security headers",
) -> SecurityCheck:
    if headers is None:
        return _not_measured(category, label, "Response headers could not be fetched.")
    if value:
        return _check(category, label, "pass", value[:120])
    return _check(category, label, "fail", "Missing", risk, f"The {label} header is not set.", how_to_fix)


def _parse_version(version: str) -> Tuple[int, ...]:
    parts = []
    for part in version.split(".")[:3]:
        digits = re.match(r"\d+", part)
        parts.append(int(digits.group()) if digits else 0)
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


# ======================
# Check groups
# ======================

def _transport_checks(
    signals: ScrapedSignals,
    security: Optional[SecuritySignals],
    headers: Optional[SecurityHeadersData],
) -> List[SecurityCheck]:
    category = "Transport"
    final_url = headers.final_url if headers is not None and headers.final_url else signals.url
    is_https = (security.is_https if security is not None else False) or final_url.lower().startswith("https://")

    checks = [
        _check(category, "HTTPS", "pass", "Enabled")
        if is_https
        else _check(
            category,
            "HTTPS",
            "fail",
            "Disabled",
            "high",
            "The page is served over plain HTTP; browsers mark it as not secure.",
            "Install a TLS certificate and redirect all HTTP traffic to HTTPS.",
        )
    ]

    checks.append(
        _header_check(
            headers,
            "Strict-Transport-Security",
            headers.hsts if headers is not None else None,
            "medium",
            "Send 'Strict-Transport-Security: max-age=31536000; includeSubDomains'.",
            category,
        )
    )
    return checks


def _header_checks(headers: Optional[SecurityHeadersData]) -> List[SecurityCheck]:
    h = headers
    checks = [
        _header_check(
            h,
            "Content-Security-Policy",
            h.csp if h else None,
            "medium",
            "Define a Content-Security-Policy that whitelists script and frame sources.",
        ),
        _header_check(
            h,
            "X-Frame-Options",
            (h.x_frame_options or ("frame-ancestors via CSP" if h.csp and "frame-ancestors" in h.csp else None))
            if h
            else None,
            "medium",
            "Send 'X-Frame-Options: SAMEORIGIN' or a CSP frame-ancestors directive to prevent clickjacking.",
        ),
        _header_check(
            h,
            "X-Content-Type-Options",
            h.x_content_type_options if h else None,
            "low",
            "Send 'X-Content-Type-Options: nosniff'.",
        ),
        _header_check(
            h,
            "Referrer-Policy",
            h.referrer_policy if h else None,
            "low",
            "Send 'Referrer-Policy: strict-origin-when-cross-origin'.",
        ),
    ]

    if h is None:
        checks.append(_not_measured("Security headers", "Server fingerprint", "Response headers could not be fetched."))
    else:
        leaked = [v for v in (h.server, h.x_powered_by) if v and _VERSION_IN_HEADER.search(v)]
        if h.x_powered_by and h.x_powered_by not in leaked:
            leaked.append(h.x_powered_by)
        if leaked:
            checks.append(
                _check(
                    "Security headers",
                    "Server fingerprint",
                    "warning",
                    ", ".join(leaked)[:120],
                    "low",
                    "Server software and version are exposed, which helps attackers pick known exploits.",
                    "Remove version numbers from the Server header and drop X-Powered-By.",
                )
            )
        else:
            checks.append(_check("Security headers", "Server fingerprint", "pass", "Hidden"))

    return checks


def _privacy_checks(security: Optional[SecuritySignals], ux_consent: bool) -> List[SecurityCheck]:
    category = "Privacy & compliance"
    if security is None:
        return [
            _not_measured(category, label, "Security signals were not collected for this page.")
            for label in ("Cookie consent", "Privacy policy", "Exposed email addresses")
        ]

    checks = []
    if security.has_cookie_consent or ux_consent:
        checks.append(_check(category, "Cookie consent", "pass", "Banner detected"))
    else:
        checks.append(
            _check(
                category,
                "Cookie consent",
                "fail",
                "Not detected",
                "medium",
                "No cookie consent mechanism was detected (GDPR / ePrivacy).",
                "Use a consent platform that blocks non-essential cookies until the visitor agrees.",
            )
        )

    if security.has_privacy_policy_link:
        checks.append(_check(category, "Privacy policy", "pass", "Linked"))
    else:
        checks.append(
            _check(
                category,
                "Privacy policy",
                "fail",
                "Not linked",
                "medium",
                "No link to a privacy policy was found.",
                "Link the privacy policy from the footer and from every form that collects personal data.",
            )
        )

    if security.exposed_emails:
        checks.append(
            _check(
                category,
                "Exposed email addresses",
                "warning",
                f"{len(security.exposed_emails)} found",
                "low",
                "Plain-text email addresses are harvested by spam bots.",
                "Use a contact form or obfuscate addresses in the markup.",
            )
        )
    else:
        checks.append(_check(category, "Exposed email addresses", "pass", "None"))
    return checks


def _third_party_checks(security: Optional[SecuritySignals]) -> List[SecurityCheck]:
    category = "Third-party code"
    if security is None:
        return [
            _not_measured(category, label, "Security signals were not collected for this page.")
            for label in ("Subresource Integrity", "jQuery version")
        ]

    checks = []
    if security.scripts_without_sri:
        checks.append(
            _check(
                category,
                "Subresource Integrity",
                "warning",
                f"{security.scripts_without_sri} of {security.third_party_script_count} external scripts unprotected",
                "medium",
                "External scripts without an integrity hash run unchecked if the CDN is compromised.",
                "Add integrity and crossorigin attributes to scripts loaded from CDNs.",
            )
        )
    else:
        checks.append(
            _check(category, "Subresource Integrity", "pass", f"{security.third_party_script_count} external scripts")
        )

    version = security.jquery_version
    if not version:
        checks.append(_check(category, "jQuery version", "pass", "Not used"))
    elif _parse_version(version) < JQUERY_MIN_SAFE:
        checks.append(
            _check(
                category,
                "jQuery version",
                "fail",
                version,
                "medium",
                f"jQuery {version} has known XSS vulnerabilities fixed in 3.5.0.",
                "Upgrade jQuery to the latest 3.x release.",
            )
        )
    else:
        checks.append(_check(category, "jQuery version", "pass", version))
    return checks


def _exposure_checks(
    signals: ScrapedSignals,
    security: Optional[SecuritySignals],
    headers: Optional[SecurityHeadersData],
) -> List[SecurityCheck]:
    category = "Exposure"
    checks = []

    if security is None:
        checks.append(_not_measured(category, "Admin login link", "Security signals were not collected for this page."))
        checks.append(_not_measured(category, "Password field over HTTP", "Security signals were not collected for this page."))
    else:
        if security.has_admin_login_link:
            checks.append(
                _check(
                    category,
                    "Admin login link",
                    "fail",
                    "Linked publicly",
                    "medium",
                    "The page links to an admin or CMS login, inviting brute-force attempts.",
                    "Remove public links to the admin area and restrict it by IP or SSO.",
                )
            )
        else:
            checks.append(_check(category, "Admin login link", "pass", "Not exposed"))

        insecure = security.has_password_field and not (
            security.is_https or signals.url.lower().startswith("https://")
        )
        if insecure:
            checks.append(
                _check(
                    category,
                    "Password field over HTTP",
                    "fail",
                    "Insecure",
                    "high",
                    "A password field is submitted over an unencrypted connection.",
                    "Serve every page with a login or payment form over HTTPS.",
                )
            )
        else:
            checks.append(_check(category, "Password field over HTTP", "pass", "Safe"))

    if headers is None:
        checks.append(_not_measured(category, "robots.txt", "robots.txt could not be fetched."))
    elif headers.robots_txt:
        checks.append(_check(category, "robots.txt", "pass", "Present"))
    else:
        checks.append(
            _check(
                category,
                "robots.txt",
                "warning",
                "Missing",
                "low",
                "No robots.txt was found, so crawlers get no guidance.",
                "Publish a robots.txt that points to the sitemap and excludes private paths.",
            )
        )
    return checks


def _ux_trust_checks(security: Optional[SecuritySignals], page_type: PageType) -> List[SecurityCheck]:
    category = "UX & trust"
    if security is None:
        return [_not_measured(category, "Aggressive popups", "Security signals were not collected for this page.")]

    checks = []
    if security.has_aggressive_popup:
        checks.append(
            _check(
                category,
                "Aggressive popups",
                "warning",
                "Detected",
                "low",
                "A popup covers the content on arrival, which Google penalises on mobile.",
                "Delay popups until scroll or exit intent and keep them easy to close.",
            )
        )
    else:
        checks.append(_check(category, "Aggressive popups", "pass", "None"))

    if page_type in (PageType.CART, PageType.CHECKOUT):
        if security.has_checkout_security_badge:
            checks.append(_check(category, "Checkout security badge", "pass", "Shown"))
        else:
            checks.append(
                _check(
                    category,
                    "Checkout security badge",
                    "fail",
                    "Missing",
                    "medium",
                    "Shoppers see no security reassurance where they enter payment details.",
                    "Show SSL, payment-provider and certification badges next to the payment step.",
                )
            )
    return checks


def _lighthouse_checks(speed: Optional[SpeedData]) -> List[SecurityCheck]:
    if speed is None:
        return []

    checks = []
    scores = [
        ("Performance", speed.performance_score, "medium"),
        ("Accessibility", speed.accessibility_score, "low"),
        ("Best Practices", speed.best_practices_score, "medium"),
        ("SEO", speed.seo_score, "low"),
    ]
    for label, score, risk in scores:
        if score is None:
            checks.append(_not_measured("Lighthouse", label, "Lighthouse did not report this category."))
        elif score >= 90:
            checks.append(_check("Lighthouse", label, "pass", f"{score}/100"))
        elif score >= 50:
            checks.append(
                _check(
                    "Lighthouse",
                    label,
                    "warning",
                    f"{score}/100",
                    "low",
                    f"The {speed.strategy} Lighthouse {label} score needs improvement.",
                    "Work through the Lighthouse report for this category.",
                )
            )
        else:
            checks.append(
                _check(
                    "Lighthouse",
                    label,
                    "fail",
                    f"{score}/100",
                    risk,
                    f"The {speed.strategy} Lighthouse {label} score is poor.",
                    "Work through the Lighthouse report for this category.",
                )
            )
    return checks


# ======================
# Core Web Vitals
# ======================

def _format_metric(value: float, unit: str) -> str:
    if unit == "ms":
        return f"{value / 1000:.1f} s" if value >= 1000 else f"{value:.0f} ms"
    return f"{value:.2f}"


def rate_vital(value: float, good: float, poor: float) -> str:
    if value <= good:
        return "good"
    if value <= poor:
        return "needs-improvement"
    return "poor"


def core_web_vitals(speed: Optional[SpeedData]) -> List[CoreWebVital]:
    if speed is None:
        return []
    vitals = []
    for field, label, good, poor, unit in CORE_WEB_VITALS:
        value = getattr(speed, field)
        if value is None:
            continue
        vitals.append(
            CoreWebVital(
                metric=label,
                value=_format_metric(value, unit),
                rating=rate_vital(value, good, poor),
                threshold=f"≤ {_format_metric(good, unit)}",
            )
        )
    return vitals


# ======================
# Aggregation
# ======================

def risk_level(checks: List[SecurityCheck]) -> str:
    high_fails = sum(1 for c in checks if c.status == "fail" and c.risk == "high")
    medium_fails = sum(1 for c in checks if c.status == "fail" and c.risk == "medium")
    if high_fails >= CRITICAL_HIGH_FAILS:
        return "critical"
    if high_fails >= 1:
        return "high"
    if medium_fails >= ELEVATED_MEDIUM_FAILS:
        return "medium"
    return "low"


def health_score(checks: List[SecurityCheck]) -> int:
    scored = [c for c in checks if c.status != "info"]
    if not scored:
        return 0
    passed = sum(1 for c in scored if c.status == "pass")
    return round_half_up(100 * passed / len(scored))


def _audit_items(items: List[SpeedAudit]) -> List[AuditItem]:
    return [AuditItem(title=i.title, display_value=i.display_value, description=i.description) for i in items]


def audit_technical_health(
    signals: ScrapedSignals,
    page_type: PageType,
    speed: Optional[SpeedData] = None,
    headers: Optional[SecurityHeadersData] = None,
) -> Optional[TechnicalHealth]:
    """Run the technical/security checks, or return None when no input was collected."""
    security = signals.security
    if speed is None and headers is None and security is None:
        return None

    checks: List[SecurityCheck] = (
        _transport_checks(signals, security, headers)
        + _header_checks(headers)
        + _privacy_checks(security, signals.ux.has_cookie_consent)
        + _third_party_checks(security)
        + _exposure_checks(signals, security, headers)
        + _ux_trust_checks(security, page_type)
        + _lighthouse_checks(speed)
    )

    grouped: Dict[str, List[SecurityCheck]] = {}
    for check in checks:
        grouped.setdefault(check.category, []).append(check)

    return TechnicalHealth(
        performance_score=speed.performance_score if speed else None,
        accessibility_score=speed.accessibility_score if speed else None,
        best_practices_score=speed.best_practices_score if speed else None,
        seo_score=speed.seo_score if speed else None,
        core_web_vitals=core_web_vitals(speed),
        checks=checks,
        groups=grouped,
        opportunities=_audit_items(speed.opportunities) if speed else [],
        diagnostics=_audit_items(speed.diagnostics) if speed else [],
        passed_count=sum(1 for c in checks if c.status == "pass"),
        score=health_score(checks),
        risk_level=risk_level(checks),
    )
