"""Tests for audit orchestration."""

import asyncio

import pytest

from analyzer import pipeline
from analyzer.models import PageType
from analyzer.pipeline import analyze_signals, run_audit
from scraper.extractor import ScrapeResult


class TestAnalyzeSignals:
    def test_deterministic(self, rich_home_signals, fast_speed, secure_headers):
        first = analyze_signals(rich_home_signals, mobile_speed=fast_speed, headers=secure_headers)
        second = analyze_signals(rich_home_signals, mobile_speed=fast_speed, headers=secure_headers)
        assert first.model_dump() == second.model_dump()

    def test_mobile_speed_preferred(self, make_signals, fast_speed):
        desktop = fast_speed.model_copy(update={"strategy": "desktop", "performance_score": 40})
        result = analyze_signals(make_signals(), desktop_speed=desktop, mobile_speed=fast_speed)
        assert result.technical_health.performance_score == 95

    def test_desktop_speed_used_alone(self, make_signals, fast_speed):
        desktop = fast_speed.model_copy(update={"strategy": "desktop", "performance_score": 40})
        result = analyze_signals(make_signals(), desktop_speed=desktop)
        assert result.technical_health.performance_score == 40

    def test_without_external_data(self, make_signals):
        result = analyze_signals(make_signals())
        assert result.technical_health is None
        assert result.page_type == PageType.HOME
        assert 0 <= result.overall_score <= 100
        assert all(c.metric != "Lighthouse Score" for c in result.benchmark.comparisons)

    def test_overall_is_mean_of_categories(self, rich_home_signals):
        result = analyze_signals(rich_home_signals)
        mean = sum(c.score for c in result.categories) / len(result.categories)
        assert abs(result.overall_score - mean) <= 0.5


class TestRunAudit:
    @pytest.fixture
    def scraped(self, monkeypatch, rich_home_signals):
        async def fake_scrape(url, viewport="desktop"):
            return ScrapeResult(signals=rich_home_signals, screenshot="c2NyZWVu")

        monkeypatch.setattr("scraper.extractor.scrape_page", fake_scrape)

    def test_rules_mode(self, monkeypatch, scraped, fast_speed, secure_headers):
        async def fake_external(url, include_speed=True):
            return None, fast_speed, secure_headers

        monkeypatch.setattr(pipeline, "collect_external_data", fake_external)

        outcome = asyncio.run(run_audit("https://shop.example.com/"))
        assert outcome.screenshot == "c2NyZWVu"
        assert outcome.result.technical_health.performance_score == 95

    def test_failed_external_collection_degrades(self, monkeypatch, scraped):
        async def broken_external(url, include_speed=True):
            raise RuntimeError("network down")

        monkeypatch.setattr(pipeline, "collect_external_data", broken_external)

        outcome = asyncio.run(run_audit("https://shop.example.com/", include_speed=False))
        assert outcome.result.technical_health is None

    def test_scrape_failure_propagates(self, monkeypatch):
        async def failing_scrape(url, viewport="desktop"):
            raise RuntimeError("Browser service unavailable")

        async def no_external(url, include_speed=True):
            return None, None, None

        monkeypatch.setattr("scraper.extractor.scrape_page", failing_scrape)
        monkeypatch.setattr(pipeline, "collect_external_data", no_external)

        with pytest.raises(RuntimeError, match="Browser service unavailable"):
            asyncio.run(run_audit("https://shop.example.com/"))


def test_optional_swallows_failures():
    async def boom():
        raise ValueError("nope")

    assert asyncio.run(pipeline._optional("Thing", boom())) is None
