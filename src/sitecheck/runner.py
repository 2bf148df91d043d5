"""Sequential scenario runner and the top-level verification entry point."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING

from sitecheck.baseline import BaselineStore
from sitecheck.events import (
    EventHandler,
    RunCompleted,
    RunEvent,
    RunStarted,
    ScenarioFinished,
    ScenarioStarted,
)
from sitecheck.exceptions import RenderError
from sitecheck.inventory import discover_pages
from sitecheck.logging import get_logger, scenario_ctx
from sitecheck.render import render
from sitecheck.scenarios import build_scenarios
from sitecheck.session import open_session

if TYPE_CHECKING:
    from sitecheck.config import Settings
    from sitecheck.scenarios import RenderFn, Scenario

logger = get_logger(__name__)


class Outcome(Enum):
    """How a scenario ended."""

    PASSED = "passed"
    FAILED = "failed"  # An assertion about the page did not hold
    ERROR = "error"  # The page could not be rendered at all
    TIMEOUT = "timeout"  # The scenario ran past its ceiling


@dataclass
class ScenarioResult:
    """Outcome of a single scenario."""

    name: str
    outcome: Outcome
    message: str = ""
    elapsed_ms: int = 0

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.PASSED


@dataclass
class RunSummary:
    """All scenario results of one run, in execution order."""

    results: list[ScenarioResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failures(self) -> list[ScenarioResult]:
        return [r for r in self.results if not r.passed]

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": len(self.failures),
            "results": [
                {
                    "name": r.name,
                    "outcome": r.outcome.value,
                    "message": r.message,
                    "elapsed_ms": r.elapsed_ms,
                }
                for r in self.results
            ],
        }


def _emit(handler: EventHandler | None, event: RunEvent) -> None:
    """Emit event to handler if present."""
    if handler:
        handler(event)


async def run_scenario(scenario: Scenario, render_fn: RenderFn) -> ScenarioResult:
    """Run one scenario, turning its failure into a result instead of raising."""
    token = scenario_ctx.set(scenario.name)
    start = time.monotonic()
    outcome = Outcome.PASSED
    message = ""
    try:
        await asyncio.wait_for(scenario.check(render_fn), timeout=scenario.timeout)
    except AssertionError as e:
        outcome, message = Outcome.FAILED, str(e)
    except TimeoutError:
        outcome, message = Outcome.TIMEOUT, f"Exceeded {scenario.timeout:g}s"
    except RenderError as e:
        outcome, message = Outcome.ERROR, str(e)
    except Exception as e:
        logger.exception("scenario_crashed", path=scenario.path)
        outcome, message = Outcome.ERROR, f"{type(e).__name__}: {e}"
    finally:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("scenario_finished", outcome=outcome.value, elapsed_ms=elapsed_ms)
        scenario_ctx.reset(token)

    return ScenarioResult(scenario.name, outcome, message, elapsed_ms)


async def run_scenarios(
    scenarios: Iterable[Scenario],
    render_fn: RenderFn,
    *,
    on_event: EventHandler | None = None,
) -> RunSummary:
    """Run scenarios one after another on the shared session.

    A failing scenario never stops the ones after it.
    """
    scenarios = list(scenarios)
    summary = RunSummary()
    total = len(scenarios)

    for index, scenario in enumerate(scenarios):
        _emit(on_event, ScenarioStarted(name=scenario.name, index=index, total=total))
        result = await run_scenario(scenario, render_fn)
        summary.results.append(result)
        _emit(on_event, ScenarioFinished(result=result, index=index, total=total))

    return summary


async def verify_site(
    settings: Settings,
    *,
    on_event: EventHandler | None = None,
    session_factory=open_session,
) -> RunSummary:
    """Verify the built site end to end.

    Args:
        settings: Run settings.
        on_event: Optional callback for progress events.
        session_factory: Async context manager factory yielding a SiteSession.

    Returns:
        Summary of every scenario.

    Raises:
        SetupError: If the server or browser could not start; no scenario runs.
    """
    pages = discover_pages(settings.source_root)
    baselines = BaselineStore(settings.resolved_baseline_path())
    scenarios = build_scenarios(
        pages,
        baselines,
        update=settings.update_baselines,
        table_selector=settings.table_selector,
        timeout=settings.scenario_timeout,
    )

    async with session_factory(settings) as session:
        _emit(on_event, RunStarted(total=len(scenarios), base_url=session.base_url))
        summary = await run_scenarios(scenarios, partial(render, session), on_event=on_event)
        _emit(on_event, RunCompleted(summary=summary))

    if settings.update_baselines:
        baselines.save()

    return summary
