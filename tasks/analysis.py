"""
Celery background tasks for CRO Auditor
Runs page audits in background workers with caching, timeout and retry
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from celery import Task

from analyzer.pipeline import run_audit
from api.models import AuditResponse
from config import settings
from core.cache import get_redis_client
from core.celery import celery_app

logger = logging.getLogger(__name__)


class AnalysisTimeoutError(Exception):
    """Raised when an audit exceeds AUDIT_TIMEOUT seconds"""

    pass


class CallbackTask(Task):
    """
    Custom Celery task class with callbacks and cleanup.
    """

    def on_success(self, retval, task_id, args, kwargs):
        """Called when task succeeds"""
        logger.info(f"✅ Task {task_id} completed successfully")

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Called when task fails"""
        logger.error(f"❌ Task {task_id} failed: {str(exc)}")

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        """Called when task is retried"""
        logger.warning(f"🔄 Task {task_id} retrying: {str(exc)}")


def _usable_cached(cached: Optional[dict], include_screenshot: bool) -> Optional[dict]:
    """A cached payload serves a request only if it can honour the screenshot flag."""
    if not cached:
        return None
    if include_screenshot:
        return cached if cached.get("screenshot") else None
    if cached.get("screenshot"):
        return {**cached, "screenshot": None}
    return cached


def _progress(task, current: int, total: int, status: str, url: str):
    if task is None:
        return
    task.update_state(
        state="PROGRESS",
        meta={
            "current": current,
            "total": total,
            "percent": int(current / total * 100),
            "status": status,
            "url": url,
        },
    )


def build_payload(outcome, url: str, viewport: str, mode: str, include_screenshot: bool) -> dict:
    """Serialize an AuditOutcome into the JSON shape returned by the API and stored in the cache."""
    return AuditResponse(
        url=url,
        viewport=viewport,
        mode=mode,
        analyzed_at=datetime.now(timezone.utc).isoformat(),
        result=outcome.result,
        screenshot=outcome.screenshot if include_screenshot else None,
    ).model_dump(mode="json")


async def _audit_async(
    url: str, viewport: str, mode: str, include_screenshot: bool, task=None, include_speed: bool = True
) -> dict:
    _progress(task, 1, 3, "Rendering page and collecting performance data...", url)
    start = time.time()
    outcome = await run_audit(url, viewport=viewport, include_speed=include_speed, mode=mode)
    logger.info(f"⏱️  Audit of {url} took {time.time() - start:.2f}s")

    _progress(task, 3, 3, "Scoring findings and formatting your report...", url)
    return build_payload(outcome, url, viewport, mode, include_screenshot)


async def _run_with_timeout(
    url: str,
    viewport: str,
    mode: str,
    include_screenshot: bool,
    task,
    include_speed: bool = True,
    timeout_seconds: int = settings.AUDIT_TIMEOUT,
) -> dict:
    """
    Run one audit under a hard timeout.

    Raises:
        AnalysisTimeoutError: If the audit exceeds timeout_seconds
    """
    try:
        return await asyncio.wait_for(
            _audit_async(url, viewport, mode, include_screenshot, task=task, include_speed=include_speed),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(f"⏱️ Analysis timeout after {timeout_seconds}s for {url}")
        raise AnalysisTimeoutError(f"Analysis timed out after {timeout_seconds} seconds")


def _execute(
    task, url: str, viewport: str, mode: str, include_screenshot: bool, include_speed: bool = True
) -> dict:
    task_id = task.request.id
    retry_count = task.request.retries
    max_attempts = settings.TASK_MAX_RETRIES + 1

    if retry_count > 0:
        task.update_state(
            state="RETRYING",
            meta={
                "attempt": retry_count + 1,
                "max_attempts": max_attempts,
                "reason": f"Previous attempt timed out after {settings.AUDIT_TIMEOUT} seconds",
                "url": url,
                "message": f"Retrying audit... (attempt {retry_count + 1} of {max_attempts})",
            },
        )
        logger.info(f"🔄 Retry attempt {retry_count + 1}/{max_attempts} for {url}")
    else:
        logger.info(f"🚀 Starting audit task {task_id} for {url}")

    # Audits without speed data are partial and bypass the cache; retries always run fresh
    if retry_count == 0 and include_speed:
        try:
            cached_result = get_redis_client().get_cached_analysis(url, mode, viewport)
        except RuntimeError as e:
            logger.warning(f"⚠️ Cache unavailable, auditing without it: {e}")
            cached_result = None
        cached_result = _usable_cached(cached_result, include_screenshot)
        if cached_result:
            logger.info(f"💾 Cache hit for {url}, returning cached result")
            return cached_result

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        result = loop.run_until_complete(
            _run_with_timeout(url, viewport, mode, include_screenshot, task, include_speed=include_speed)
        )
    except AnalysisTimeoutError as e:
        if retry_count < settings.TASK_MAX_RETRIES:
            logger.info(f"🔄 Scheduling retry {retry_count + 2}/{max_attempts} for {url}")
            raise task.retry(exc=e, countdown=2)
        logger.error(f"❌ All {max_attempts} attempts exhausted for {url}")
        raise
    finally:
        loop.close()

    if include_speed:
        try:
            get_redis_client().cache_analysis(url, result, mode, viewport)
        except RuntimeError as e:
            logger.warning(f"⚠️ Could not cache result for {url}: {e}")

    return result


@celery_app.task(
    bind=True,
    base=CallbackTask,
    name="tasks.audit_website",
    autoretry_for=(),  # Retries are scheduled manually on timeout only
    max_retries=settings.TASK_MAX_RETRIES,
)
def audit_website(
    self,
    url: str,
    viewport: str = "desktop",
    mode: str = "rules",
    include_screenshot: bool = False,
    include_speed: bool = True,
) -> dict:
    """
    Celery task to audit a page for CRO issues.

    Returns:
        Serialized AuditResponse: the AnalysisResult plus request metadata

    Raises:
        AnalysisTimeoutError: After all attempts timed out
    """
    return _execute(self, url, viewport, mode, include_screenshot, include_speed)


@celery_app.task(
    bind=True,
    base=CallbackTask,
    name="tasks.audit_website_priority",
    autoretry_for=(),
    max_retries=settings.TASK_MAX_RETRIES,
)
def audit_website_priority(
    self,
    url: str,
    viewport: str = "desktop",
    mode: str = "rules",
    include_screenshot: bool = False,
    include_speed: bool = True,
) -> dict:
    """Same audit as audit_website, routed to the priority queue."""
    return _execute(self, url, viewport, mode, include_screenshot, include_speed)
