from typing import Any, Dict, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from analyzer.models import AnalysisResult
from analyzer.signals import ScrapedSignals, SecurityHeadersData, SpeedData


def normalize_url(url: str) -> str:
    """Trim the URL and default the scheme to https."""
    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Not a valid http(s) URL: {url}")
    return url


# Requests
class AnalyzeRequest(BaseModel):
    url: str
    viewport: Literal["desktop", "mobile"] = "desktop"
    mode: Literal["rules", "ai"] = "rules"
    include_screenshot: bool = False
    include_speed: bool = True

    @field_validator("url")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_url(value)


class AsyncAnalyzeRequest(AnalyzeRequest):
    priority: bool = False


class SignalsRequest(BaseModel):
    """Audit of a caller-supplied extraction; no browser involved."""

    signals: ScrapedSignals
    desktop_speed: Optional[SpeedData] = None
    mobile_speed: Optional[SpeedData] = None
    headers: Optional[SecurityHeadersData] = None


# Responses
class AuditResponse(BaseModel):
    url: str
    viewport: str
    mode: str
    analyzed_at: str
    result: AnalysisResult
    screenshot: Optional[str] = None


class AsyncTaskResponse(BaseModel):
    task_id: str
    status: str
    message: str
    poll_url: str


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    message: str
    progress: Optional[Dict[str, Any]] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    retry_info: Optional[Any] = None


class CacheClearResponse(BaseModel):
    cleared: bool
    url: str
    message: str
