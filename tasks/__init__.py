# Tasks package - Celery background tasks
from .analysis import (
    audit_website,
    audit_website_priority,
    AnalysisTimeoutError,
    CallbackTask,
)

__all__ = [
    "audit_website",
    "audit_website_priority",
    "AnalysisTimeoutError",
    "CallbackTask",
]
