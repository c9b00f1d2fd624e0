"""API endpoint tests using FastAPI's TestClient."""

import asyncio
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from fastapi.testclient import TestClient

from analyzer.pipeline import AuditOutcome, analyze_signals
from main import app

client = TestClient(app)


def _fake_run_audit(outcome=None, exc=None):
    async def fake(url, viewport="desktop", include_speed=True, mode="rules"):
        if exc is not None:
            raise exc
        return outcome

    return fake


class FakeAsyncResult:
    state = "PENDING"
    info = None
    result = None

    def __init__(self, task_id):
        self.id = task_id


def with_state(monkeypatch, state, info=None, result=None):
    fake = type("FakeResult", (FakeAsyncResult,), {"state": state, "info": info, "result": result})
    monkeypatch.setattr("celery.result.AsyncResult", fake)


# ----------------------------------------------------------------------------
# Synchronous audit
# ----------------------------------------------------------------------------

class TestAnalyze:
    def test_success(self, monkeypatch, rich_home_signals):
        outcome = AuditOutcome(result=analyze_signals(rich_home_signals), screenshot="c2hvdA==")
        monkeypatch.setattr("api.routes.run_audit", _fake_run_audit(outcome))

        response = client.post("/analyze", json={"url": "shop.example.com"})
        assert response.status_code == 200
        body = response.json()
        assert body["url"] == "https://shop.example.com"
        assert body["mode"] == "rules"
        assert body["screenshot"] is None
        assert len(body["result"]["categories"]) == 9

    def test_screenshot_included_on_request(self, monkeypatch, rich_home_signals):
        outcome = AuditOutcome(result=analyze_signals(rich_home_signals), screenshot="c2hvdA==")
        monkeypatch.setattr("api.routes.run_audit", _fake_run_audit(outcome))

        response = client.post("/analyze", json={"url": "https://shop.example.com", "include_screenshot": True})
        assert response.json()["screenshot"] == "c2hvdA=="

    @pytest.mark.parametrize(
        "exc, status",
        [
            (asyncio.TimeoutError(), 504),
            (anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com")), 502),
            (ValueError("Model response contained no usable audit categories"), 422),
            (RuntimeError("Browser pool is exhausted"), 503),
            (KeyError("boom"), 500),
        ],
    )
    def test_error_mapping(self, monkeypatch, exc, status):
        monkeypatch.setattr("api.routes.run_audit", _fake_run_audit(exc=exc))
        response = client.post("/analyze", json={"url": "https://shop.example.com"})
        assert response.status_code == status

    @pytest.mark.parametrize("payload", [{"url": "ftp://shop.example.com"}, {"url": "https://"}, {"url": "x", "viewport": "tablet"}])
    def test_invalid_request(self, payload):
        assert client.post("/analyze", json=payload).status_code == 422


class TestAnalyzeSignals:
    def test_rule_engine_without_browser(self, rich_home_signals, fast_speed):
        payload = {
            "signals": rich_home_signals.model_dump(mode="json"),
            "mobile_speed": fast_speed.model_dump(mode="json"),
        }
        response = client.post("/analyze/signals", json=payload)
        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "rules"
        assert body["result"]["page_type"] == "home"
        assert body["result"]["technical_health"]["performance_score"] == 95


# ----------------------------------------------------------------------------
# Background audits
# ----------------------------------------------------------------------------

class TestAsyncAnalyze:
    def test_submit(self, monkeypatch):
        submitted = []

        class FakeTaskFn:
            def __init__(self, name):
                self.name = name

            def delay(self, *args):
                submitted.append((self.name, args))
                return FakeAsyncResult("abc123")

        monkeypatch.setattr("tasks.audit_website", FakeTaskFn("normal"))
        monkeypatch.setattr("tasks.audit_website_priority", FakeTaskFn("priority"))

        response = client.post("/analyze/async", json={"url": "shop.example.com", "mode": "ai", "priority": True})
        assert response.status_code == 200
        assert response.json()["poll_url"] == "/analyze/status/abc123"
        assert submitted == [("priority", ("https://shop.example.com", "desktop", "ai", False, True))]

    def test_submit_without_speed_data(self, monkeypatch):
        submitted = []

        class FakeTaskFn:
            def delay(self, *args):
                submitted.append(args)
                return FakeAsyncResult("abc123")

        monkeypatch.setattr("tasks.audit_website", FakeTaskFn())

        response = client.post("/analyze/async", json={"url": "example.com", "include_speed": False})
        assert response.status_code == 200
        assert submitted == [("https://example.com", "desktop", "rules", False, False)]

    def test_status_progress(self, monkeypatch):
        with_state(monkeypatch, "PROGRESS", info={"current": 1, "total": 3, "percent": 33})
        body = client.get("/analyze/status/abc123").json()
        assert body["status"] == "PROGRESS"
        assert body["progress"]["percent"] == 33

    def test_status_failure(self, monkeypatch):
        with_state(monkeypatch, "FAILURE", info=RuntimeError("timed out"))
        body = client.get("/analyze/status/abc123").json()
        assert body["error"] == "timed out"

    def test_result_pending(self, monkeypatch):
        with_state(monkeypatch, "STARTED")
        assert client.get("/analyze/result/abc123").status_code == 202

    def test_result_success(self, monkeypatch, audit_payload):
        with_state(monkeypatch, "SUCCESS", result=audit_payload)
        body = client.get("/analyze/result/abc123").json()
        assert body["result"]["result"]["page_type"] == "home"


class TestGeneratePdf:
    def test_pdf_download(self, monkeypatch, audit_payload):
        with_state(monkeypatch, "SUCCESS", result=audit_payload)
        response = client.post("/generate-pdf/abc123")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="cro-audit-shop-example-com-' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    @pytest.mark.parametrize("state, status", [("PENDING", 404), ("PROGRESS", 202), ("FAILURE", 400)])
    def test_not_ready(self, monkeypatch, state, status):
        with_state(monkeypatch, state, info="x")
        assert client.post("/generate-pdf/abc123").status_code == status

    def test_invalid_payload(self, monkeypatch):
        with_state(monkeypatch, "SUCCESS", result={"unexpected": True})
        assert client.post("/generate-pdf/abc123").status_code == 500


# ----------------------------------------------------------------------------
# Health and cache
# ----------------------------------------------------------------------------

class TestHealth:
    def test_health(self):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self):
        assert client.get("/").json()["service"] == "CRO Auditor"

    def test_detailed_status_degrades_without_redis(self, monkeypatch):
        def no_redis():
            raise RuntimeError("Connection refused")

        class NoWorkers:
            def inspect(self):
                return SimpleNamespace(active=lambda: None)

        monkeypatch.setattr("core.cache.get_redis_client", no_redis)
        monkeypatch.setattr("core.celery.celery_app", SimpleNamespace(control=NoWorkers()))

        body = client.get("/status/detailed").json()
        assert body["redis"].startswith("error")
        assert body["celery"] == "no_workers"
        assert body["browser_pool"] == "not_initialized"
        assert body["overall_status"] == "degraded"


class TestClearCache:
    def test_clear(self, monkeypatch):
        cleared_urls = []

        class FakeRedisClient:
            def clear_analysis(self, url):
                cleared_urls.append(url)
                return 2

        monkeypatch.setattr("core.cache.get_redis_client", lambda: FakeRedisClient())

        response = client.delete("/cache/analysis/shop.dk/x")
        assert response.status_code == 200
        assert response.json()["cleared"] is True
        assert cleared_urls == ["https://shop.dk/x"]

    def test_nothing_to_clear(self, monkeypatch):
        class EmptyRedisClient:
            def clear_analysis(self, url):
                return 0

        monkeypatch.setattr("core.cache.get_redis_client", lambda: EmptyRedisClient())

        body = client.delete("/cache/analysis/shop.dk/x").json()
        assert body["cleared"] is False
        assert body["message"] == "Cache entry not found"
