"""
Headless Chromium sessions.

Each request gets its own browser, launched on entry to acquire_session()
and closed on exit whatever happened in between.
"""
import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import Settings
from .detect import detect_block
from .errors import FetchTimeout
from .models import FetchOutcome

logger = logging.getLogger("BrowserSession")
logger.setLevel(logging.INFO)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",  # hides navigator.webdriver
    "--disable-gpu",
]


class BrowserSession:
    """One page in one isolated browser context."""

    def __init__(self, page: Page, settings: Settings, proxy_url: Optional[str] = None):
        self.page = page
        self.settings = settings
        self.proxy_url = proxy_url

    @property
    def proxy_used(self) -> bool:
        return self.proxy_url is not None

    async def _bounded(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.settings.nav_timeout_ms / 1000)

    async def fetch(self, url: str, as_text: bool = False) -> FetchOutcome:
        """
        Navigate to url and wait for DOM-ready only (not network idle).

        as_text=True returns document.body.innerText as the body (JSON
        endpoints); otherwise the rendered HTML is returned. The HTML is kept
        on the outcome either way and block detection runs on it. Every
        step, not only navigation, is bounded by nav_timeout_ms.
        """
        try:
            response = await self.page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.nav_timeout_ms,
            )
            status = response.status if response else None
            html = await self._bounded(self.page.content())
            title = await self._bounded(self.page.title())
            body = html
            if as_text:
                body = await self._bounded(
                    self.page.evaluate("() => document.body ? document.body.innerText || '' : ''")
                )
        except (PlaywrightTimeoutError, asyncio.TimeoutError) as e:
            raise FetchTimeout(
                f"Timed out after {self.settings.nav_timeout_ms}ms loading page",
                target_url=url,
                proxy_used=self.proxy_used,
            ) from e

        return FetchOutcome(
            http_status=status,
            raw_body=body or "",
            html=html or "",
            blocked=detect_block(html, title),
            title=title or "",
        )


def pick_proxy(settings: Settings) -> Optional[str]:
    return random.choice(settings.proxy_urls) if settings.proxy_urls else None


@asynccontextmanager
async def acquire_session(settings: Settings) -> AsyncIterator[BrowserSession]:
    proxy_url = pick_proxy(settings)
    launch_options = {"headless": settings.headless, "args": LAUNCH_ARGS}
    if proxy_url:
        launch_options["proxy"] = {"server": proxy_url}

    async with async_playwright() as p:
        browser = await p.chromium.launch(**launch_options)
        try:
            context = await browser.new_context(
                user_agent=settings.user_agent,
                locale=settings.browser_locale,
                timezone_id=settings.browser_timezone,
            )
            page = await context.new_page()
            logger.info(f"Session acquired | Proxy: {'Yes' if proxy_url else 'No'}")
            yield BrowserSession(page, settings, proxy_url)
        finally:
            try:
                await browser.close()
            except PlaywrightError as e:
                logger.warning(f"Browser close failed: {e}")
            logger.info("Session released")
