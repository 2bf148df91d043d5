"""Process-wide server and browser session shared by every render."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from sitecheck.exceptions import SetupError
from sitecheck.logging import get_logger
from sitecheck.server import PortResolver, StaticSiteServer

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page

    from sitecheck.config import Settings

logger = get_logger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]


@dataclass
class SiteSession:
    """Handle threaded through every render call.

    One page (tab) is shared by all scenarios, so navigations must not overlap.
    """

    base_url: str
    page: Page
    settings: Settings
    browser: Browser | None = None
    server: StaticSiteServer | None = None

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"


@asynccontextmanager
async def open_session(
    settings: Settings,
    ports: PortResolver | None = None,
) -> AsyncIterator[SiteSession]:
    """Start the static server and a headless Chromium, close both on exit.

    Teardown runs in reverse order: browser, Playwright driver, then server.

    Raises:
        SetupError: If the server cannot start, the Playwright driver cannot
            start or the browser cannot launch.
    """
    if ports is None:
        ports = PortResolver(settings.preferred_port, settings.host)

    async with AsyncExitStack() as stack:
        server = StaticSiteServer(settings.resolved_site_root(), settings.host, ports.port)
        server.start()
        # shutdown() blocks until the serve loop exits
        stack.push_async_callback(asyncio.to_thread, server.close)

        try:
            playwright = await stack.enter_async_context(async_playwright())
        except (PlaywrightError, OSError) as e:
            raise SetupError(f"Cannot start Playwright: {e}") from e

        try:
            browser = await playwright.chromium.launch(
                executable_path=settings.browser_executable,
                headless=settings.headless,
                args=CHROMIUM_ARGS,
            )
        except PlaywrightError as e:
            raise SetupError(f"Cannot launch Chromium: {e}") from e
        stack.push_async_callback(browser.close)

        page = await browser.new_page(
            viewport={"width": settings.viewport_width, "height": settings.viewport_height}
        )
        logger.info(
            "browser_started",
            executable=settings.browser_executable or "bundled",
            headless=settings.headless,
        )
        yield SiteSession(
            base_url=server.url,
            page=page,
            settings=settings,
            browser=browser,
            server=server,
        )
