import asyncio
import logging
import re
from datetime import datetime, timezone

import anthropic
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from analyzer.pipeline import analyze_signals, run_audit
from api.models import (
    AnalyzeRequest,
    AsyncAnalyzeRequest,
    AsyncTaskResponse,
    AuditResponse,
    CacheClearResponse,
    SignalsRequest,
    TaskStatusResponse,
    normalize_url,
)
from config import settings

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def root():
    return {
        "service": "CRO Auditor",
        "status": "running",
        "endpoints": {
            "analyze": "/analyze (POST)",
            "analyze_signals": "/analyze/signals (POST)",
            "analyze_async": "/analyze/async (POST)",
            "status": "/analyze/status/{task_id} (GET)",
            "result": "/analyze/result/{task_id} (GET)",
            "pdf": "/generate-pdf/{task_id} (POST)",
        },
    }


@router.post("/analyze", response_model=AuditResponse)
async def analyze_website(request: AnalyzeRequest):
    """
    Audits a page synchronously and returns the full CRO report.

    mode="rules" runs the deterministic rule engine; mode="ai" asks Claude
    for the same report shape. The screenshot is only included when
    include_screenshot=true.
    """
    try:
        outcome = await run_audit(
            request.url,
            viewport=request.viewport,
            include_speed=request.include_speed,
            mode=request.mode,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"⏱️ Page navigation timeout for {request.url}: {str(e)}")
        raise HTTPException(
            status_code=504,
            detail="Page load timeout exceeded. The target website may be slow or unresponsive.",
        )
    except anthropic.APIError as e:
        logger.error(f"❌ Anthropic API failure for {request.url}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=502, detail=f"AI analysis service failed: {str(e)}")
    except ValueError as e:
        logger.error(f"❌ Parsing or validation failed for {request.url}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=422, detail=f"Analysis parsing failed: {str(e)}")
    except RuntimeError as e:
        logger.error(f"❌ Browser failure for {request.url}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=503, detail=f"Browser service unavailable: {str(e)}")
    except Exception as e:
        logger.error(f"❌ Unexpected failure for {request.url}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    return AuditResponse(
        url=request.url,
        viewport=request.viewport,
        mode=request.mode,
        analyzed_at=_now(),
        result=outcome.result,
        screenshot=outcome.screenshot if request.include_screenshot else None,
    )


@router.post("/analyze/signals", response_model=AuditResponse)
async def analyze_supplied_signals(request: SignalsRequest):
    """Runs the rule engine over a caller-supplied extraction without opening a browser."""
    result = analyze_signals(
        request.signals,
        desktop_speed=request.desktop_speed,
        mobile_speed=request.mobile_speed,
        headers=request.headers,
    )
    return AuditResponse(
        url=request.signals.url,
        viewport=request.signals.viewport,
        mode="rules",
        analyzed_at=_now(),
        result=result,
    )


@router.post("/analyze/async", response_model=AsyncTaskResponse)
async def analyze_website_async(request: AsyncAnalyzeRequest):
    """
    Submit an audit for background processing.
    Returns immediately with a task_id for status polling.
    """
    try:
        from tasks import audit_website, audit_website_priority

        task_fn = audit_website_priority if request.priority else audit_website
        task = task_fn.delay(
            request.url, request.viewport, request.mode, request.include_screenshot, request.include_speed
        )
    except Exception as e:
        logger.error(f"❌ Failed to submit audit for {request.url}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to submit analysis task: {str(e)}")

    return AsyncTaskResponse(
        task_id=task.id,
        status="PENDING",
        message="Analysis task submitted successfully",
        poll_url=f"/analyze/status/{task.id}",
    )


@router.get("/analyze/status/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: str):
    """
    Check the status of a background audit.

    States: PENDING, STARTED, PROGRESS (with current/total/percent/status),
    RETRYING (with attempt info), SUCCESS (with result), FAILURE (with error).
    """
    try:
        from celery.result import AsyncResult

        task = AsyncResult(task_id)
        state = task.state

        if state == "PENDING":
            return TaskStatusResponse(task_id=task_id, status=state, message="Task is waiting in queue")
        if state == "STARTED":
            return TaskStatusResponse(task_id=task_id, status=state, message="Task is being processed")
        if state == "PROGRESS":
            return TaskStatusResponse(
                task_id=task_id,
                status=state,
                message="Task is in progress",
                progress=task.info if isinstance(task.info, dict) else None,
            )
        if state == "SUCCESS":
            return TaskStatusResponse(
                task_id=task_id, status=state, message="Task completed successfully", result=task.result
            )
        if state == "FAILURE":
            return TaskStatusResponse(task_id=task_id, status=state, message="Task failed", error=str(task.info))
        if state in ("RETRY", "RETRYING"):
            return TaskStatusResponse(
                task_id=task_id,
                status=state,
                message="Task is retrying after timeout",
                retry_info=task.info if isinstance(task.info, dict) else str(task.info),
            )
        return TaskStatusResponse(task_id=task_id, status=state, message=f"Unknown state: {state}")

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {str(e)}")


@router.get("/analyze/result/{task_id}")
async def get_task_result(task_id: str):
    """
    Get the result of a completed audit.
    Returns 202 while the task is still running and 404 for unknown tasks.
    """
    try:
        from celery.result import AsyncResult

        task = AsyncResult(task_id)

        if task.state == "SUCCESS":
            return {"task_id": task_id, "status": "SUCCESS", "result": task.result}
        elif task.state in ("PENDING", "STARTED", "PROGRESS", "RETRYING"):
            raise HTTPException(
                status_code=202,
                detail="Task is still being processed. Please check status endpoint.",
            )
        elif task.state == "FAILURE":
            raise HTTPException(status_code=500, detail=f"Task failed: {task.info}")
        else:
            raise HTTPException(
                status_code=404,
                detail=f"Task not found or in unknown state: {task.state}",
            )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task result: {str(e)}")


def pdf_filename(url: str) -> str:
    safe_url = re.sub(r"[^\w\-]", "-", url.replace("https://", "").replace("http://", ""))[:50]
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"cro-audit-{safe_url}-{timestamp}.pdf"


@router.post("/generate-pdf/{task_id}")
async def generate_pdf_report(task_id: str):
    """
    Generate a PDF report for a completed audit task.

    Returns:
        StreamingResponse with PDF file for download
    """
    from utils.reporting.pdf import generate_pdf

    try:
        from celery.result import AsyncResult

        task = AsyncResult(task_id)

        if task.state == "PENDING":
            raise HTTPException(status_code=404, detail="Task not found. Please check the task_id.")

        if task.state in ("STARTED", "PROGRESS", "RETRYING"):
            raise HTTPException(
                status_code=202,
                detail="Analysis is still in progress. Please wait for completion before generating PDF.",
            )

        if task.state == "FAILURE":
            raise HTTPException(
                status_code=400,
                detail=f"Analysis failed: {str(task.info)}. Cannot generate PDF.",
            )

        if task.state != "SUCCESS":
            raise HTTPException(
                status_code=400,
                detail=f"Task is in unexpected state: {task.state}. Cannot generate PDF.",
            )

        audit_data = task.result
        if not audit_data or not isinstance(audit_data, dict) or "result" not in audit_data:
            raise HTTPException(
                status_code=500,
                detail="Invalid analysis data format. Cannot generate PDF.",
            )

        pdf_buffer = generate_pdf(audit_data)
        filename = pdf_filename(audit_data.get("url", "audit"))

        return StreamingResponse(
            pdf_buffer,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ PDF generation error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate PDF: {str(e)}")


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/status/detailed")
async def detailed_status_check():
    """
    Enhanced status check with Redis, Celery, and browser pool health.
    """
    status_info = {
        "api": "healthy",
        "redis": "unknown",
        "celery": "unknown",
        "browser_pool": "unknown",
        "anthropic_api": "configured" if settings.ANTHROPIC_API_KEY else "missing",
        "pagespeed_api": "configured" if settings.PAGESPEED_API_KEY else "missing",
    }

    # Check Redis connection
    try:
        from core.cache import get_redis_client

        redis_client = get_redis_client()
        if redis_client.ping():
            status_info["redis"] = "connected"
            status_info["redis_stats"] = redis_client.get_stats()
        else:
            status_info["redis"] = "disconnected"
    except Exception as e:
        status_info["redis"] = f"error: {str(e)}"

    # Check Celery workers
    try:
        from core.celery import celery_app

        active_workers = celery_app.control.inspect().active()
        if active_workers:
            status_info["celery"] = "workers_active"
            status_info["celery_workers"] = list(active_workers.keys())
        else:
            status_info["celery"] = "no_workers"
    except Exception as e:
        status_info["celery"] = f"error: {str(e)}"

    # Check browser pool (if initialized)
    try:
        from core import browser

        pool = browser._browser_pool
        if pool and pool._initialized:
            status_info["browser_pool"] = await pool.health_check()
        else:
            status_info["browser_pool"] = "not_initialized"
    except Exception as e:
        status_info["browser_pool"] = f"error: {str(e)}"

    # The rule engine needs neither API key, so only Redis decides overall health
    redis_state = str(status_info["redis"])
    if "error" in redis_state or "disconnected" in redis_state:
        status_info["overall_status"] = "degraded"
    else:
        status_info["overall_status"] = "healthy"

    return status_info


@router.delete("/cache/analysis/{url:path}", response_model=CacheClearResponse)
async def clear_analysis_cache(url: str):
    """
    Clear every cached audit of a URL, across modes and viewports.
    Useful for forcing a fresh audit of a previously analyzed page.
    """
    try:
        from core.cache import get_redis_client

        url = normalize_url(url)
        cleared = get_redis_client().clear_analysis(url)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to clear analysis cache: {str(e)}")

    return CacheClearResponse(
        cleared=cleared > 0,
        url=url,
        message="Analysis cache removed" if cleared else "Cache entry not found",
    )
