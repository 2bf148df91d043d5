"""Rich-based display component for verification runs."""

from __future__ import annotations

from rich.console import Console

from sitecheck.events import RunCompleted, RunEvent, RunStarted, ScenarioFinished, ScenarioStarted
from sitecheck.runner import Outcome, ScenarioResult

OUTCOME_STYLES = {
    Outcome.PASSED: ("✓", "green"),
    Outcome.FAILED: ("✗", "red"),
    Outcome.ERROR: ("!", "magenta"),
    Outcome.TIMEOUT: ("⏱", "yellow"),
}


def format_elapsed(elapsed_ms: int) -> str:
    """Format elapsed time for display (e.g., 3450 -> '3.5s')."""
    return f"{elapsed_ms / 1000:.1f}s" if elapsed_ms >= 1000 else f"{elapsed_ms}ms"


class RunDisplay:
    """Handles all console output for a verification run.

    Modes:
    - Default: one line per finished scenario, failure summary at the end
    - Verbose: also announce each scenario as it starts
    - Quiet: no output (for JSON mode or scripting)
    """

    def __init__(self, verbose: bool = False, quiet: bool = False, console: Console | None = None):
        self.verbose = verbose
        self.quiet = quiet
        self.console = console or Console(highlight=False)

    def handle(self, event: RunEvent) -> None:
        """Route events to their handlers."""
        if self.quiet:
            return

        match event:
            case RunStarted():
                self._on_run_started(event)
            case ScenarioStarted():
                self._on_scenario_started(event)
            case ScenarioFinished():
                self._on_scenario_finished(event)
            case RunCompleted():
                self._on_run_completed(event)

    def _on_run_started(self, event: RunStarted) -> None:
        self.console.print(
            f"[bold]Verifying {event.total} scenarios[/bold] against {event.base_url}"
        )
        self.console.print()

    def _on_scenario_started(self, event: ScenarioStarted) -> None:
        if self.verbose:
            self.console.print(f"  [dim]→ {event.name}...[/dim]")

    def _on_scenario_finished(self, event: ScenarioFinished) -> None:
        result = event.result
        icon, color = OUTCOME_STYLES[result.outcome]
        self.console.print(
            f"  [{color}]{icon}[/{color}] {result.name}  "
            f"[dim][{format_elapsed(result.elapsed_ms)}][/dim]"
        )

    def _on_run_completed(self, event: RunCompleted) -> None:
        summary = event.summary
        self.console.print()
        if summary.ok:
            self.console.print(f"[green]All {summary.total} scenarios passed[/green]")
            return

        self.console.print(
            f"[red]{len(summary.failures)} of {summary.total} scenarios failed[/red]"
        )
        for result in summary.failures:
            self._print_failure(result)

    def _print_failure(self, result: ScenarioResult) -> None:
        _, color = OUTCOME_STYLES[result.outcome]
        label = f"[{color}]{result.outcome.value}[/{color}]"
        self.console.print(f"  {label} [bold]{result.name}[/bold]")
        if result.message:
            self.console.print(f"    {result.message}", markup=False)
