"""Pytest configuration for end-to-end tests.

E2E tests in this directory drive a real Chromium through Playwright:
    playwright install chromium

Run e2e tests with:
    pytest tests/e2e/ --run-e2e
"""

from __future__ import annotations

import pytest

from tests.factories import make_client_page, make_docs_tree

SITE_PAGES = {
    "index.html": ("", 0),
    "index-cn.html": ("", 0),
    "components/overview/index.html": ("Overview", 0),
    "components/overview-cn/index.html": ("组件总览", 0),
    "docs/resources.html": ("Resources", 0),
    "docs/resources-cn.html": ("资源", 0),
    "components/button/index.html": ("Button", 2),
    "components/button-cn/index.html": ("Button 按钮", 2),
    "components/date-picker/index.html": ("DatePicker", 3),
    "components/date-picker-cn/index.html": ("DatePicker 日期选择框", 3),
}


@pytest.fixture
def docs_site(tmp_path):
    """Markdown sources plus a client-rendered ``_site`` export."""
    make_docs_tree(
        tmp_path,
        [
            "components/button/index.en-US.md",
            "components/button/index.zh-CN.md",
            "components/date-picker/index.en-US.md",
            "components/date-picker/index.zh-CN.md",
            "components/overview/index.en-US.md",
        ],
    )
    for name, (heading, tables) in SITE_PAGES.items():
        make_client_page(tmp_path, name, heading, tables)
    return tmp_path
