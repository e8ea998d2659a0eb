"""Playwright-backed browser session provider."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable

from playwright.async_api import async_playwright

from stepshot.config_loader import BrowserProfile

logger = logging.getLogger(__name__)

STEALTH_INIT_SCRIPT = """
(() => {
  window.chrome = { runtime: {} };
  Object.defineProperty(navigator, 'webdriver', { get: () => false });
  Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
  Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3] });
  const getContext = HTMLCanvasElement.prototype.getContext;
  HTMLCanvasElement.prototype.getContext = function (...args) {
    const context = getContext.apply(this, args);
    if (args[0] === '2d' && context) {
      context.getImageData = function () {
        throw new Error('Blocked for anti-fingerprint');
      };
    }
    return context;
  };
})();
"""


@dataclass
class BrowserSession:
    """Holds Playwright session objects for one run."""

    playwright: Any
    browser: Any
    context: Any
    page: Any

    async def close(self) -> None:
        try:
            await self.page.close()
        finally:
            try:
                await self.context.close()
            finally:
                try:
                    await self.browser.close()
                finally:
                    await self.playwright.stop()


class BrowserSessionProvider:
    """Launches one isolated context and page, and tears it down exactly once."""

    def __init__(
        self,
        profile: BrowserProfile | None = None,
        *,
        action_timeout_ms: int = 5000,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.profile = profile or BrowserProfile()
        self.action_timeout_ms = action_timeout_ms
        self._playwright_factory = playwright_factory
        self._session: BrowserSession | None = None

    @property
    def session(self) -> BrowserSession | None:
        return self._session

    async def acquire(self, headless: bool) -> BrowserSession:
        if self._session is not None:
            raise RuntimeError("browser session already acquired")
        playwright = await self._playwright_factory().start()
        browser = None
        try:
            browser = await playwright.chromium.launch(
                headless=headless,
                args=list(self.profile.launch_args),
                slow_mo=self.profile.slow_mo,
            )
            context = await browser.new_context(**self.profile.context_options())
            context.set_default_timeout(self.action_timeout_ms)
            page = await context.new_page()
            if self.profile.stealth:
                await page.add_init_script(STEALTH_INIT_SCRIPT)
        except BaseException:
            if browser is not None:
                await browser.close()
            await playwright.stop()
            raise
        self._session = BrowserSession(playwright=playwright, browser=browser, context=context, page=page)
        logger.debug("Browser session acquired", extra={"headless": headless})
        return self._session

    async def release(self) -> None:
        """Close the session if one is open; later calls are no-ops."""

        session, self._session = self._session, None
        if session is None:
            return
        await session.close()
        logger.debug("Browser session released")

    @asynccontextmanager
    async def scoped(self, headless: bool) -> AsyncIterator[BrowserSession]:
        """Acquire a session and release it on every exit path."""

        session = await self.acquire(headless)
        try:
            yield session
        finally:
            await self.release()
