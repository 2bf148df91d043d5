"""Typed events for a verification run.

The runner emits events; display components decide how to render them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitecheck.runner import RunSummary, ScenarioResult


@dataclass
class RunStarted:
    """Emitted once the session is up, before the first scenario."""

    total: int  # Scenarios to run
    base_url: str


@dataclass
class ScenarioStarted:
    """Emitted before each scenario."""

    name: str
    index: int  # 0-based
    total: int


@dataclass
class ScenarioFinished:
    """Emitted after each scenario, whatever its outcome."""

    result: ScenarioResult
    index: int
    total: int


@dataclass
class RunCompleted:
    """Emitted after the last scenario, before teardown."""

    summary: RunSummary


RunEvent = RunStarted | ScenarioStarted | ScenarioFinished | RunCompleted
EventHandler = Callable[[RunEvent], None]
