# API package - FastAPI components
from .models import (
    AnalyzeRequest,
    AsyncAnalyzeRequest,
    AsyncTaskResponse,
    AuditResponse,
    CacheClearResponse,
    SignalsRequest,
    TaskStatusResponse,
    normalize_url,
)

__all__ = [
    # Models
    "AnalyzeRequest",
    "AsyncAnalyzeRequest",
    "AsyncTaskResponse",
    "AuditResponse",
    "CacheClearResponse",
    "SignalsRequest",
    "TaskStatusResponse",
    "normalize_url",
]
