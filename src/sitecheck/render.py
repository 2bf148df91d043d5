"""Render a site path and extract a queryable document.

The browser is tried first since the site is a client-rendered SPA. When
navigation itself fails, a plain HTTP fetch of the same URL stands in.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError

from sitecheck.exceptions import RenderError
from sitecheck.logging import get_logger
from sitecheck.webapi import TextDecoder

if TYPE_CHECKING:
    from sitecheck.session import SiteSession

logger = get_logger(__name__)

HTML_PARSER = "html.parser"

BROWSER = "browser"
FETCH = "fetch"

Strategy = Callable[[], Awaitable["RenderResult"]]


@dataclass(frozen=True)
class RenderResult:
    """HTTP status and parsed markup for one rendered path."""

    status: int
    document: BeautifulSoup
    strategy: str = BROWSER
    url: str = ""

    def text(self, selector: str) -> str:
        """Concatenated text of all elements matching ``selector``."""
        return "".join(node.get_text() for node in self.document.select(selector))

    def first_text(self, selector: str) -> str:
        node = self.document.select_one(selector)
        return node.get_text() if node is not None else ""


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, HTML_PARSER)


async def render_with_browser(session: SiteSession, url: str) -> RenderResult:
    """Navigate the shared tab to ``url`` and capture the rendered markup.

    Only navigation errors propagate. A missing table is normal for some
    pages, so the selector wait never fails the render.
    """
    settings = session.settings
    page = session.page

    response = await page.goto(
        url,
        wait_until="domcontentloaded",
        timeout=settings.navigation_timeout * 1000,
    )

    # Let the SPA finish rendering after the initial document
    await asyncio.sleep(settings.settle_delay)

    try:
        await page.wait_for_selector(
            settings.table_selector, timeout=settings.selector_timeout * 1000
        )
    except PlaywrightError as e:
        logger.debug(
            "selector_wait_skipped", url=url, selector=settings.table_selector, error=str(e)
        )

    html = await page.content()
    status = response.status if response is not None else 0
    return RenderResult(status=status, document=parse_html(html), strategy=BROWSER, url=url)


async def render_with_fetch(url: str, timeout: float = 10.0) -> RenderResult:
    """Fetch ``url`` without a browser and parse the raw body."""
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
    html = TextDecoder(response.encoding or "utf-8").decode(response.content)
    return RenderResult(
        status=response.status_code, document=parse_html(html), strategy=FETCH, url=url
    )


async def with_fallback(url: str, primary: Strategy, fallback: Strategy) -> RenderResult:
    """Run ``primary``; on any failure run ``fallback`` once.

    Raises:
        RenderError: If both strategies fail.
    """
    try:
        return await primary()
    except Exception as primary_error:
        logger.error("render_fallback", url=url, error=repr(primary_error))
        try:
            return await fallback()
        except Exception as fallback_error:
            raise RenderError(url, primary_error, fallback_error) from fallback_error


async def render(session: SiteSession, path: str) -> RenderResult:
    """Render ``path`` on the served site.

    Args:
        session: Shared server/browser session.
        path: Site path such as ``/components/button/``.

    Returns:
        RenderResult with status 0 when the browser got no response object.

    Raises:
        RenderError: If the browser and the fallback fetch both failed.
    """
    url = session.url_for(path)
    return await with_fallback(
        url,
        primary=lambda: render_with_browser(session, url),
        fallback=lambda: render_with_fetch(url, timeout=session.settings.fetch_timeout),
    )
