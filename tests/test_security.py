"""Tests for the technical and security health auditor."""

import pytest

from analyzer.models import PageType, SecurityCheck
from analyzer.security import (
    NOT_MEASURED,
    audit_technical_health,
    core_web_vitals,
    health_score,
    rate_vital,
    risk_level,
)
from analyzer.signals import SecurityHeadersData, SecuritySignals, SpeedData


def by_label(health, label):
    return next(c for c in health.checks if c.label == label)


def _fail(risk):
    return SecurityCheck(category="x", label="x", status="fail", value="v", risk=risk)


class TestAuditTechnicalHealth:
    def test_nothing_collected(self, make_signals):
        assert audit_technical_health(make_signals(), PageType.HOME) is None

    def test_well_configured_site(self, make_signals, security_signals, secure_headers, fast_speed):
        health = audit_technical_health(make_signals(security=security_signals), PageType.HOME, fast_speed, secure_headers)

        assert by_label(health, "HTTPS").status == "pass"
        assert by_label(health, "Strict-Transport-Security").status == "pass"
        assert by_label(health, "Server fingerprint").value == "Hidden"
        assert by_label(health, "robots.txt").status == "pass"
        assert by_label(health, "SEO").status == "fail"
        assert by_label(health, "Best Practices").status == "warning"
        assert health.performance_score == 95
        assert health.risk_level == "low"
        assert set(health.groups) >= {"Transport", "Security headers", "Lighthouse"}
        assert health.passed_count == sum(1 for c in health.checks if c.status == "pass")

    def test_missing_inputs_are_not_measured(self, make_signals, fast_speed):
        health = audit_technical_health(make_signals(), PageType.HOME, fast_speed)

        csp = by_label(health, "Content-Security-Policy")
        assert csp.status == "info"
        assert csp.value == NOT_MEASURED
        assert by_label(health, "Cookie consent").status == "info"
        assert health.score == health_score(health.checks)

    def test_insecure_site(self, make_signals):
        security = SecuritySignals(is_https=False, has_password_field=True, jquery_version="1.12.4")
        headers = SecurityHeadersData(final_url="http://shop.example.com/", status_code=200, x_powered_by="PHP/7.4.3")
        health = audit_technical_health(
            make_signals(url="http://shop.example.com/", security=security), PageType.HOME, headers=headers
        )

        assert by_label(health, "HTTPS").status == "fail"
        assert by_label(health, "Password field over HTTP").risk == "high"
        assert by_label(health, "jQuery version").status == "fail"
        assert by_label(health, "Server fingerprint").value == "PHP/7.4.3"
        assert by_label(health, "robots.txt").status == "warning"
        assert health.risk_level == "high"

    @pytest.mark.parametrize("version, status", [("3.4.1", "fail"), ("3.5", "pass"), ("3.7.1", "pass")])
    def test_jquery_threshold(self, make_signals, version, status):
        signals = make_signals(security=SecuritySignals(is_https=True, jquery_version=version))
        assert by_label(audit_technical_health(signals, PageType.HOME), "jQuery version").status == status

    def test_checkout_badge_only_in_purchase_flow(self, make_signals):
        signals = make_signals(security=SecuritySignals(is_https=True))
        checkout = audit_technical_health(signals, PageType.CHECKOUT)
        home = audit_technical_health(signals, PageType.HOME)

        assert by_label(checkout, "Checkout security badge").status == "fail"
        assert "Checkout security badge" not in [c.label for c in home.checks]

    def test_frame_ancestors_counts_as_frame_protection(self, make_signals):
        headers = SecurityHeadersData(final_url="https://shop.example.com/", csp="frame-ancestors 'self'")
        health = audit_technical_health(make_signals(), PageType.HOME, headers=headers)
        assert by_label(health, "X-Frame-Options").status == "pass"


class TestAggregation:
    def test_risk_tiers(self):
        assert risk_level([_fail("high")] * 3) == "critical"
        assert risk_level([_fail("high")]) == "high"
        assert risk_level([_fail("medium")] * 3) == "medium"
        assert risk_level([_fail("medium")] * 2 + [_fail("low")]) == "low"

    def test_score_ignores_info(self):
        checks = [
            SecurityCheck(category="x", label="a", status="pass", value="v"),
            SecurityCheck(category="x", label="b", status="fail", value="v", risk="low"),
            SecurityCheck(category="x", label="c", status="info", value=NOT_MEASURED),
        ]
        assert health_score(checks) == 50

    def test_score_with_nothing_measured(self):
        assert health_score([SecurityCheck(category="x", label="c", status="info", value=NOT_MEASURED)]) == 0


class TestCoreWebVitals:
    def test_formatting_and_rating(self, fast_speed):
        vitals = {v.metric: v for v in core_web_vitals(fast_speed)}

        lcp = vitals["Largest Contentful Paint"]
        assert (lcp.value, lcp.rating, lcp.threshold) == ("2.1 s", "good", "≤ 2.5 s")
        assert vitals["Time to First Byte"].value == "300 ms"
        assert vitals["Cumulative Layout Shift"].value == "0.05"
        assert vitals["Cumulative Layout Shift"].threshold == "≤ 0.10"

    def test_missing_metrics_are_skipped(self):
        vitals = core_web_vitals(SpeedData(lcp=5000))
        assert [(v.metric, v.rating) for v in vitals] == [("Largest Contentful Paint", "poor")]
        assert core_web_vitals(None) == []

    @pytest.mark.parametrize("value, rating", [(2500, "good"), (4000, "needs-improvement"), (4001, "poor")])
    def test_rate_vital_bounds(self, value, rating):
        assert rate_vital(value, 2500, 4000) == rating
