"""Tests for the background audit task and the audit cache."""

from types import SimpleNamespace

import pytest

from analyzer.pipeline import AuditOutcome, analyze_signals
from core.cache import RedisClient, analysis_cache_key
from tasks import analysis
from tasks.analysis import AnalysisTimeoutError, build_payload


class FakeTask:
    def __init__(self, retries=0):
        self.request = SimpleNamespace(id="task-1", retries=retries)
        self.states = []

    def update_state(self, state, meta):
        self.states.append((state, meta))

    def retry(self, exc, countdown):
        return RuntimeError(f"retry scheduled: {exc}")


class FakeCache:
    def __init__(self, cached=None):
        self.cached = cached
        self.stored = []
        self.reads = 0

    def get_cached_analysis(self, url, mode="rules", viewport="desktop"):
        self.reads += 1
        return self.cached

    def cache_analysis(self, url, result, mode="rules", viewport="desktop"):
        self.stored.append((url, mode, viewport))
        return True


@pytest.fixture
def outcome(rich_home_signals):
    return AuditOutcome(result=analyze_signals(rich_home_signals), screenshot="c2hvdA==")


class TestBuildPayload:
    def test_shape(self, outcome):
        payload = build_payload(outcome, "https://shop.example.com/", "mobile", "rules", include_screenshot=False)
        assert payload["viewport"] == "mobile"
        assert payload["screenshot"] is None
        assert payload["result"]["page_type"] == "home"
        assert len(payload["result"]["categories"]) == 9
        assert payload["analyzed_at"].endswith("+00:00")

    def test_screenshot_on_request(self, outcome):
        payload = build_payload(outcome, "https://shop.example.com/", "desktop", "rules", include_screenshot=True)
        assert payload["screenshot"] == "c2hvdA=="


class TestExecute:
    def test_cache_hit_skips_audit(self, monkeypatch):
        cache = FakeCache(cached={"url": "https://shop.example.com/", "result": {}})
        monkeypatch.setattr(analysis, "get_redis_client", lambda: cache)

        async def must_not_run(*args, **kwargs):
            raise AssertionError("audit should not run on a cache hit")

        monkeypatch.setattr(analysis, "run_audit", must_not_run)

        result = analysis._execute(FakeTask(), "https://shop.example.com/", "desktop", "rules", False)
        assert result == cache.cached

    def test_fresh_audit_reports_progress_and_caches(self, monkeypatch, outcome):
        cache = FakeCache()
        monkeypatch.setattr(analysis, "get_redis_client", lambda: cache)

        async def fake_run_audit(url, viewport="desktop", include_speed=True, mode="rules"):
            return outcome

        monkeypatch.setattr(analysis, "run_audit", fake_run_audit)

        task = FakeTask()
        result = analysis._execute(task, "https://shop.example.com/", "mobile", "rules", False)

        assert result["url"] == "https://shop.example.com/"
        assert [meta["current"] for state, meta in task.states if state == "PROGRESS"] == [1, 3]
        assert cache.stored == [("https://shop.example.com/", "rules", "mobile")]

    def test_without_speed_data_bypasses_cache(self, monkeypatch, outcome):
        cache = FakeCache(cached={"url": "https://shop.example.com/", "result": {}})
        monkeypatch.setattr(analysis, "get_redis_client", lambda: cache)
        calls = []

        async def fake_run_audit(url, viewport="desktop", include_speed=True, mode="rules"):
            calls.append(include_speed)
            return outcome

        monkeypatch.setattr(analysis, "run_audit", fake_run_audit)

        result = analysis._execute(FakeTask(), "https://shop.example.com/", "desktop", "rules", False, False)

        assert calls == [False]
        assert result["result"]["page_type"] == "home"
        assert cache.reads == 0
        assert cache.stored == []

    def test_cached_payload_without_screenshot_is_not_reused(self, monkeypatch, outcome):
        cache = FakeCache(cached={"url": "https://shop.example.com/", "screenshot": None, "result": {}})
        monkeypatch.setattr(analysis, "get_redis_client", lambda: cache)

        async def fake_run_audit(url, viewport="desktop", include_speed=True, mode="rules"):
            return outcome

        monkeypatch.setattr(analysis, "run_audit", fake_run_audit)

        result = analysis._execute(FakeTask(), "https://shop.example.com/", "desktop", "rules", True)
        assert result["screenshot"] == "c2hvdA=="

    def test_cached_screenshot_is_dropped_when_not_requested(self, monkeypatch):
        cache = FakeCache(cached={"url": "https://shop.example.com/", "screenshot": "c2hvdA==", "result": {}})
        monkeypatch.setattr(analysis, "get_redis_client", lambda: cache)

        result = analysis._execute(FakeTask(), "https://shop.example.com/", "desktop", "rules", False)
        assert result["screenshot"] is None
        assert cache.cached["screenshot"] == "c2hvdA=="

    def test_timeout_schedules_retry(self, monkeypatch):
        monkeypatch.setattr(analysis, "get_redis_client", lambda: FakeCache())

        async def timing_out(*args, **kwargs):
            raise AnalysisTimeoutError("Analysis timed out after 150 seconds")

        monkeypatch.setattr(analysis, "_run_with_timeout", timing_out)

        with pytest.raises(RuntimeError, match="retry scheduled"):
            analysis._execute(FakeTask(), "https://shop.example.com/", "desktop", "rules", False)

    def test_last_attempt_reraises_timeout(self, monkeypatch):
        monkeypatch.setattr(analysis, "get_redis_client", lambda: FakeCache())
        monkeypatch.setattr(analysis.settings, "TASK_MAX_RETRIES", 2)

        async def timing_out(*args, **kwargs):
            raise AnalysisTimeoutError("Analysis timed out after 150 seconds")

        monkeypatch.setattr(analysis, "_run_with_timeout", timing_out)

        task = FakeTask(retries=2)
        with pytest.raises(AnalysisTimeoutError):
            analysis._execute(task, "https://shop.example.com/", "desktop", "rules", False)
        state, meta = task.states[0]
        assert state == "RETRYING"
        assert meta["attempt"] == 3


class FakeRedis:
    def __init__(self, keys):
        self.keys = keys
        self.patterns = []

    def scan_iter(self, match):
        self.patterns.append(match)
        return iter(self.keys)

    def delete(self, *keys):
        return len(keys)


class TestAnalysisCache:
    def test_key_includes_mode_and_viewport(self):
        assert analysis_cache_key("https://shop.dk/", "ai", "mobile") == "cache:analysis:ai:mobile:https://shop.dk/"

    def test_clear_analysis_spans_modes_and_viewports(self):
        client = RedisClient.__new__(RedisClient)
        client.client = FakeRedis(["a", "b"])

        assert client.clear_analysis("https://shop.dk/") == 2
        assert client.client.patterns == ["cache:analysis:*:*:https://shop.dk/"]
