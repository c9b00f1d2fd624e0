"""
CRO Auditor Service - Main Application

A FastAPI backend with distributed task processing that renders pages with
Playwright, extracts conversion-relevant signals and audits them with a
deterministic rule engine (or, optionally, with Claude AI) to produce a
scored CRO report.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before settings are read
load_dotenv()

from config import settings  # noqa: E402
from api.routes import router  # noqa: E402

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 CRO Auditor starting")
    yield
    from core.browser import close_browser_pool
    from core.cache import close_redis_client

    await close_browser_pool()
    close_redis_client()
    logger.info("🛑 CRO Auditor stopped")


# Initialize FastAPI app
app = FastAPI(title="CRO Auditor Service", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60, workers=2)
