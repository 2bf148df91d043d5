"""Verification scenarios: fixed pages plus one pair per component page."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from functools import partial

from sitecheck.baseline import BaselineStore
from sitecheck.checks import (
    DEFAULT_TABLE_SELECTOR,
    count_tables,
    expect_contains_if_present,
    expect_status,
    expect_text_if_present,
)
from sitecheck.inventory import component_name, top_level_components
from sitecheck.logging import get_logger
from sitecheck.render import RenderResult

logger = get_logger(__name__)

DEFAULT_SCENARIO_TIMEOUT = 15.0
ZH_SUFFIX = "-cn"

RenderFn = Callable[[str], Awaitable[RenderResult]]
CheckFn = Callable[[RenderFn], Awaitable[None]]


@dataclass(frozen=True)
class FixedPage:
    """A page whose path and expected text are known up front."""

    name: str
    path: str
    selector: str  # "title" compares the first <title>, others all matches
    pattern: str


FIXED_PAGES = [
    FixedPage("Basic Pages en", "/", "title", "Ant Design"),
    FixedPage("Basic Pages zh", "/index-cn", "title", "Ant Design"),
    FixedPage("Overview en", "/components/overview", "h1", "Overview"),
    FixedPage("Overview zh", "/components/overview-cn", "h1", "组件总览"),
    FixedPage("Resource en", "/docs/resources", "h1", "Resources"),
    FixedPage("Resource zh", "/docs/resources-cn", "h1", "资源"),
]


@dataclass(frozen=True)
class Scenario:
    """One independent verification, run against the shared session."""

    name: str
    path: str
    check: CheckFn
    timeout: float = DEFAULT_SCENARIO_TIMEOUT


async def expect_fixed_page(render: RenderFn, page: FixedPage) -> None:
    result = await render(page.path)
    expect_status(result)

    if page.selector == "title":
        text = result.first_text("title")
    else:
        text = result.text(page.selector)
    expect_text_if_present(text, page.pattern)


async def expect_component(
    render: RenderFn,
    identifier: str,
    baselines: BaselineStore,
    *,
    update: bool = False,
    table_selector: str = DEFAULT_TABLE_SELECTOR,
) -> int:
    """Verify one component page and its table-count baseline.

    Args:
        render: Render function bound to the session.
        identifier: Page identifier, ``-cn`` suffixed for the zh page.
        baselines: Store holding the expected table counts.
        update: Accept the observed count instead of checking it.
        table_selector: Selector for the API tables being counted.

    Returns:
        Number of tables found.
    """
    result = await render(f"/{identifier}/")
    expect_status(result)

    heading = result.text("h1").lower()
    expect_contains_if_present(heading, component_name(identifier))

    tables = count_tables(result.document, table_selector)
    logger.info("table_count", component=identifier, tables=tables)

    if update:
        baselines.accept(identifier, tables)
    else:
        baselines.check(identifier, tables)
    return tables


def fixed_scenarios(timeout: float = DEFAULT_SCENARIO_TIMEOUT) -> list[Scenario]:
    return [
        Scenario(
            name=page.name,
            path=page.path,
            check=partial(expect_fixed_page, page=page),
            timeout=timeout,
        )
        for page in FIXED_PAGES
    ]


def component_scenarios(
    pages: Iterable[str],
    baselines: BaselineStore,
    *,
    update: bool = False,
    table_selector: str = DEFAULT_TABLE_SELECTOR,
    timeout: float = DEFAULT_SCENARIO_TIMEOUT,
) -> list[Scenario]:
    """Two scenarios (zh then en) for every top-level component page."""
    scenarios = []
    for component in top_level_components(pages):
        for locale, identifier in (("zh", component + ZH_SUFFIX), ("en", component)):
            scenarios.append(
                Scenario(
                    name=f"Component {component} {locale} Page",
                    path=f"/{identifier}/",
                    check=partial(
                        expect_component,
                        identifier=identifier,
                        baselines=baselines,
                        update=update,
                        table_selector=table_selector,
                    ),
                    timeout=timeout,
                )
            )
    return scenarios


def build_scenarios(
    pages: Iterable[str],
    baselines: BaselineStore,
    *,
    update: bool = False,
    table_selector: str = DEFAULT_TABLE_SELECTOR,
    timeout: float = DEFAULT_SCENARIO_TIMEOUT,
) -> list[Scenario]:
    return fixed_scenarios(timeout) + component_scenarios(
        pages,
        baselines,
        update=update,
        table_selector=table_selector,
        timeout=timeout,
    )
