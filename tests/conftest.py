"""Pytest configuration and fixtures."""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

import pytest

from sitecheck.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import Generator


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests (requires Playwright Chromium)",
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "e2e: marks tests that drive a real browser (need --run-e2e)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip e2e tests unless explicitly enabled."""
    if config.getoption("--run-e2e"):
        return

    skip_e2e = pytest.mark.skip(reason="need --run-e2e option to run")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture
def log_output() -> Generator[StringIO, None, None]:
    """Route structured logs to a buffer as JSON lines."""
    output = StringIO()
    configure_logging(log_level="DEBUG", json_format=True, stream=output)
    yield output
    configure_logging(log_level="WARNING", json_format=False)
