"""
Centralized configuration for CRO Auditor
All environment variables and settings are defined here
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provides centralized configuration with validation and defaults.
    """

    # ======================
    # API Configuration
    # ======================
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used by the optional AI audit mode"
    )
    MAX_TOKENS: int = Field(default=8000, description="Max tokens for Claude response")
    PAGESPEED_API_KEY: str = Field(
        default="",
        description="Google PageSpeed Insights API key (anonymous quota if empty)"
    )
    PAGESPEED_API_URL: str = Field(
        default="https://www.googleapis.com/pagespeedonline/v5/runPagespeed",
        description="PageSpeed Insights endpoint"
    )

    # ======================
    # Redis Configuration
    # ======================
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )

    # ======================
    # Celery Configuration
    # ======================
    CELERY_BROKER_URL: Optional[str] = Field(
        default=None,
        description="Celery broker URL (defaults to REDIS_URL if not set)"
    )
    CELERY_RESULT_BACKEND: str = Field(
        default="redis://localhost:6379/1",
        description="Celery result backend URL"
    )
    CELERY_RESULT_EXPIRES: int = Field(
        default=259200,  # 72 hours (3 days)
        description="Time in seconds before task results expire"
    )

    # ======================
    # Browser Pool Configuration
    # ======================
    BROWSER_POOL_SIZE: int = Field(
        default=3,
        description="Number of browser instances in pool"
    )
    BROWSER_MAX_PAGES: int = Field(
        default=10,
        description="Max pages per browser before recycling"
    )
    BROWSER_TIMEOUT: int = Field(
        default=300,
        description="Max browser age in seconds before recycling"
    )

    # ======================
    # Scraping Configuration
    # ======================
    NAVIGATION_TIMEOUT_MS: int = Field(
        default=30000,
        description="First navigation attempt timeout in milliseconds"
    )
    NAVIGATION_RETRY_TIMEOUT_MS: int = Field(
        default=60000,
        description="Second navigation attempt timeout in milliseconds"
    )
    SETTLE_DELAY_MS: int = Field(
        default=2000,
        description="Wait after load for late-rendered content"
    )
    EXTERNAL_HTTP_TIMEOUT: float = Field(
        default=45.0,
        description="Timeout in seconds for PageSpeed and header requests"
    )
    AUDIT_TIMEOUT: int = Field(
        default=150,
        description="Overall audit timeout in seconds (background tasks)"
    )

    # ======================
    # Heuristic Thresholds
    # ======================
    CTA_PRIMARY_MIN_AREA_PX2: float = Field(
        default=6000,
        description="Minimum rendered area for a CTA to count as primary"
    )
    CTA_PRIMARY_MIN_FONT_PX: float = Field(
        default=15,
        description="Minimum font size for a CTA to count as primary"
    )
    NAV_MAX_ITEMS: int = Field(
        default=7,
        description="Top-level navigation items before choice overload is flagged"
    )

    # ======================
    # Cache Configuration
    # ======================
    CACHE_TTL: int = Field(
        default=86400,  # 24 hours
        description="Cache time-to-live in seconds"
    )

    # ======================
    # Task Configuration
    # ======================
    TASK_TIME_LIMIT: int = Field(
        default=600,  # 10 minutes
        description="Hard time limit for tasks in seconds"
    )
    TASK_SOFT_TIME_LIMIT: int = Field(
        default=480,  # 8 minutes
        description="Soft time limit for tasks in seconds"
    )
    TASK_MAX_RETRIES: int = Field(
        default=2,
        description="Maximum number of task retries after a timeout"
    )
    TASK_DEFAULT_RETRY_DELAY: int = Field(
        default=60,
        description="Default delay in seconds before retrying a task"
    )
    WORKER_PREFETCH_MULTIPLIER: int = Field(
        default=1,
        description="Tasks to prefetch per worker"
    )
    WORKER_MAX_TASKS_PER_CHILD: int = Field(
        default=10,
        description="Max tasks before worker restart"
    )

    # ======================
    # Screenshot Configuration
    # ======================
    MAX_SCREENSHOT_DIMENSION: int = Field(
        default=1800,
        description="Maximum screenshot dimension in pixels"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def celery_broker(self) -> str:
        """Get Celery broker URL, defaulting to REDIS_URL if not set"""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def get_redis_url() -> str:
    """Get Redis connection URL"""
    return settings.REDIS_URL


def get_anthropic_api_key() -> str:
    """Get Anthropic API key"""
    return settings.ANTHROPIC_API_KEY


def get_anthropic_model() -> str:
    """Get Anthropic model name"""
    return settings.ANTHROPIC_MODEL
