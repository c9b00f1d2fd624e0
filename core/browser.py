"""
Browser pool manager for CRO Auditor
Manages a pool of pre-launched Playwright browser instances for efficient reuse
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

from config import settings

logger = logging.getLogger(__name__)


# Rendering profile per audited viewport
VIEWPORT_PROFILES: Dict[str, dict] = {
    "desktop": {
        "viewport": {"width": 1440, "height": 900},
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "is_mobile": False,
        "has_touch": False,
    },
    "mobile": {
        "viewport": {"width": 390, "height": 844},
        "user_agent": (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
        ),
        "is_mobile": True,
        "has_touch": True,
        "device_scale_factor": 3,
    },
}


@dataclass
class _Slot:
    browser: Browser
    created_at: datetime = field(default_factory=datetime.now)
    page_count: int = 0
    in_use: bool = False
    temporary: bool = False

    @property
    def age_seconds(self) -> float:
        return (datetime.now() - self.created_at).total_seconds()


class BrowserPool:
    """
    Manages a pool of Playwright browser instances with automatic health checks and recycling.

    Each acquire() opens a fresh context with the requested viewport profile, so
    desktop and mobile audits can share the same warm browsers.
    """

    def __init__(
        self,
        pool_size: int = settings.BROWSER_POOL_SIZE,
        max_pages_per_browser: int = settings.BROWSER_MAX_PAGES,
        browser_timeout: int = settings.BROWSER_TIMEOUT,
    ):
        """
        Args:
            pool_size: Number of browser instances to keep warm
            max_pages_per_browser: Pages served before a browser is relaunched
            browser_timeout: Seconds a browser may live before it is relaunched
        """
        self.pool_size = pool_size
        self.max_pages_per_browser = max_pages_per_browser
        self.browser_timeout = browser_timeout

        self.playwright = None
        self.slots: List[_Slot] = []
        self.semaphore = asyncio.Semaphore(pool_size)
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self):
        """Launch the warm browser instances once."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            try:
                logger.info(f"🚀 Launching {self.pool_size} browsers for the audit pool...")
                self.playwright = await async_playwright().start()

                for i in range(self.pool_size):
                    self.slots.append(_Slot(browser=await self._launch()))
                    logger.info(f"✅ Browser {i+1}/{self.pool_size} launched")

                self._initialized = True
            except Exception as e:
                logger.error(f"❌ Failed to initialize browser pool: {str(e)}")
                await self.cleanup()
                raise RuntimeError(f"Browser pool could not start: {e}") from e

    async def _launch(self) -> Browser:
        return await self.playwright.chromium.launch(
            headless=True,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
                "--no-sandbox",
                "--disable-setuid-sandbox",
                "--disable-gpu",
            ],
        )

    def _is_stale(self, slot: _Slot) -> bool:
        return slot.age_seconds > self.browser_timeout or slot.page_count >= self.max_pages_per_browser

    async def _relaunch(self, slot: _Slot):
        logger.info(f"♻️  Relaunching browser (age: {slot.age_seconds:.0f}s, pages: {slot.page_count})")
        try:
            await slot.browser.close()
        except Exception as e:
            logger.warning(f"⚠️  Error closing stale browser: {str(e)}")
        slot.browser = await self._launch()
        slot.created_at = datetime.now()
        slot.page_count = 0

    async def _claim_slot(self) -> _Slot:
        for slot in self.slots:
            if not slot.in_use:
                if self._is_stale(slot):
                    await self._relaunch(slot)
                return slot

        # Only reachable if the semaphore and slot list disagree
        logger.warning("⚠️  No idle browser in pool, launching a temporary one")
        return _Slot(browser=await self._launch(), temporary=True)

    async def acquire(self, viewport: str = "desktop") -> Tuple[Browser, BrowserContext, Page]:
        """
        Open a page rendered with the given viewport profile.

        Args:
            viewport: "desktop" or "mobile"

        Returns:
            Tuple of (browser, context, page); hand all three back to release()
        """
        profile = VIEWPORT_PROFILES.get(viewport)
        if profile is None:
            raise ValueError(f"Unknown viewport '{viewport}'")

        await self.semaphore.acquire()

        async with self._lock:
            try:
                slot = await self._claim_slot()
            except Exception as e:
                self.semaphore.release()
                raise RuntimeError(f"Could not launch a browser: {e}") from e
            slot.in_use = True
            slot.page_count += 1
            if slot.temporary:
                self.slots.append(slot)

        try:
            context = await slot.browser.new_context(**profile)
            page = await context.new_page()
        except Exception as e:
            logger.error(f"❌ Failed to open {viewport} page: {str(e)}")
            await self._return_slot(slot.browser)
            raise RuntimeError(f"Could not open a browser page: {e}") from e

        logger.info(f"✅ Browser acquired for {viewport} (page count: {slot.page_count})")
        return slot.browser, context, page

    async def release(self, browser: Browser, context: BrowserContext, page: Page):
        """Close the page and context and return the browser to the pool."""
        try:
            await page.close()
            await context.close()
        except Exception as e:
            logger.error(f"⚠️  Error releasing browser: {str(e)}")
        finally:
            await self._return_slot(browser)

    async def _return_slot(self, browser: Browser):
        temporary = None
        async with self._lock:
            for slot in self.slots:
                if slot.browser is browser:
                    slot.in_use = False
                    if slot.temporary:
                        self.slots.remove(slot)
                        temporary = slot
                    break
        self.semaphore.release()

        if temporary is not None:
            try:
                await temporary.browser.close()
            except Exception as e:
                logger.warning(f"⚠️  Error closing temporary browser: {str(e)}")

    async def health_check(self) -> dict:
        async with self._lock:
            pooled = [s for s in self.slots if not s.temporary]
            in_use = sum(1 for s in pooled if s.in_use)
            available = len(pooled) - in_use
            avg_age = sum(s.age_seconds for s in pooled) / len(pooled) if pooled else 0
            avg_pages = sum(s.page_count for s in pooled) / len(pooled) if pooled else 0

            return {
                "total_browsers": len(pooled),
                "in_use": in_use,
                "available": available,
                "temporary": len(self.slots) - len(pooled),
                "average_age_seconds": round(avg_age, 2),
                "average_page_count": round(avg_pages, 2),
                "status": "healthy" if available > 0 else "saturated",
            }

    async def cleanup(self):
        """Close every browser and stop Playwright."""
        logger.info("🧹 Cleaning up browser pool...")

        async with self._lock:
            for slot in self.slots:
                try:
                    await slot.browser.close()
                except Exception as e:
                    logger.warning(f"⚠️  Error closing browser: {str(e)}")
            self.slots.clear()

            if self.playwright:
                try:
                    await self.playwright.stop()
                except Exception as e:
                    logger.warning(f"⚠️  Error stopping Playwright: {str(e)}")
                self.playwright = None

            self._initialized = False
            logger.info("✅ Browser pool cleaned up")


# Global browser pool instance
_browser_pool: Optional[BrowserPool] = None


async def get_browser_pool(pool_size: int = settings.BROWSER_POOL_SIZE) -> BrowserPool:
    """Get or create the global browser pool instance."""
    global _browser_pool

    if _browser_pool is None:
        _browser_pool = BrowserPool(pool_size=pool_size)
        await _browser_pool.initialize()

    return _browser_pool


async def close_browser_pool():
    """Close the global browser pool"""
    global _browser_pool

    if _browser_pool is not None:
        await _browser_pool.cleanup()
        _browser_pool = None
