"""Assertions applied to rendered pages."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sitecheck.exceptions import CheckFailed

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from sitecheck.render import RenderResult

SUCCESS_STATUS = 200
DEFAULT_TABLE_SELECTOR = ".markdown table"


def expect_status(result: RenderResult, expected: int = SUCCESS_STATUS) -> None:
    if result.status != expected:
        target = result.url or "page"
        raise CheckFailed(f"Expected status {expected} for {target}, got {result.status}")


def expect_text_if_present(text: str, pattern: str) -> None:
    """Check ``text`` against a regex, but only when there is text to check.

    Client-rendered elements may still be empty at capture time. An empty
    element cannot be verified, so it passes and the status check stays the
    primary signal.
    """
    if not text:
        return
    if re.search(pattern, text) is None:
        raise CheckFailed(f"Expected {text!r} to match {pattern!r}")


def expect_contains_if_present(text: str, fragment: str) -> None:
    """Case-insensitive substring check, skipped when either side is empty."""
    if not text or not fragment:
        return
    if fragment.lower() not in text.lower():
        raise CheckFailed(f"Expected {text!r} to contain {fragment!r}")


def count_tables(document: BeautifulSoup, selector: str = DEFAULT_TABLE_SELECTOR) -> int:
    return len(document.select(selector))
