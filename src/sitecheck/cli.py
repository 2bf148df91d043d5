"""Typer CLI for sitecheck."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from sitecheck.baseline import BaselineStore
from sitecheck.config import Settings
from sitecheck.display import RunDisplay
from sitecheck.exceptions import SetupError
from sitecheck.inventory import discover_pages, top_level_components
from sitecheck.logging import configure_logging
from sitecheck.runner import verify_site

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_SETUP_ERROR = 2

app = typer.Typer(
    name="sitecheck",
    help="End-to-end verification of the built documentation site",
    no_args_is_help=True,
)
baseline_app = typer.Typer(
    help="Inspect and accept table-count baselines", no_args_is_help=True
)
app.add_typer(baseline_app, name="baseline")

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

SourceOption = Annotated[
    Path | None,
    typer.Option("-s", "--source", help="Documentation source root (contains components/)"),
]
BaselineOption = Annotated[
    Path | None,
    typer.Option("-b", "--baselines", help="Table-count baseline file"),
]


def _settings(**overrides) -> Settings:
    """Environment settings with CLI overrides applied."""
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


@app.callback()
def main_callback(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
    log_json: Annotated[bool, typer.Option("--log-json", help="Emit logs as JSON lines")] = False,
) -> None:
    """Configure logging before any command runs."""
    settings = _settings(log_level=log_level, log_json_format=log_json or None)
    configure_logging(settings.log_level, settings.log_json_format)


def _open_store(settings: Settings) -> BaselineStore:
    try:
        return BaselineStore(settings.resolved_baseline_path())
    except SetupError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=EXIT_SETUP_ERROR) from e


@app.command()
def run(
    site: Annotated[Path | None, typer.Option("--site", help="Built site directory")] = None,
    source: SourceOption = None,
    baselines: BaselineOption = None,
    port: Annotated[int | None, typer.Option("-p", "--port", help="Preferred server port")] = None,
    chrome: Annotated[
        str | None,
        typer.Option(
            "--chrome", help="Local Chrome/Chromium executable", envvar="SITECHECK_CHROME"
        ),
    ] = None,
    update_baselines: Annotated[
        bool,
        typer.Option(
            "-u", "--update-baselines", help="Accept observed table counts as new baselines"
        ),
    ] = False,
    headed: Annotated[bool, typer.Option("--headed", help="Show the browser window")] = False,
    output_json: Annotated[bool, typer.Option("--json", help="Print the summary as JSON")] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show each scenario as it starts")
    ] = False,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="No progress output")] = False,
) -> None:
    """Serve the site, load every page in Chromium and check its shape."""
    settings = _settings(
        site_root=site,
        source_root=source,
        baseline_path=baselines,
        preferred_port=port,
        browser_executable=chrome,
        update_baselines=update_baselines or None,
        headless=False if headed else None,
    )
    display = RunDisplay(verbose=verbose, quiet=quiet or output_json)
    try:
        summary = asyncio.run(verify_site(settings, on_event=display.handle))
    except SetupError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=EXIT_SETUP_ERROR) from e

    if output_json:
        console.print_json(json.dumps(summary.to_dict(), ensure_ascii=False))

    raise typer.Exit(code=EXIT_OK if summary.ok else EXIT_FAILURES)


@app.command()
def pages(
    source: SourceOption = None,
    show_all: Annotated[bool, typer.Option("--all", help="Include nested sub-pages")] = False,
) -> None:
    """List the component pages a run would verify."""
    settings = _settings(source_root=source)
    found = discover_pages(settings.source_root)
    if not show_all:
        found = top_level_components(found)
    for page in found:
        console.print(page, markup=False)


@baseline_app.command("show")
def baseline_show(source: SourceOption = None, baselines: BaselineOption = None) -> None:
    """Print the recorded table counts."""
    settings = _settings(source_root=source, baseline_path=baselines)
    store = _open_store(settings)
    if not len(store):
        console.print(f"[dim]No baselines recorded in {store.path}[/dim]")
        return
    for identifier, count in store.items():
        console.print(f"{identifier}  [cyan]{count}[/cyan]")


@baseline_app.command("accept")
def baseline_accept(
    identifier: Annotated[str, typer.Argument(help="Page identifier, e.g. components/button-cn")],
    count: Annotated[int, typer.Argument(help="Table count to record", min=0)],
    source: SourceOption = None,
    baselines: BaselineOption = None,
) -> None:
    """Record a new table count for one page."""
    settings = _settings(source_root=source, baseline_path=baselines)
    store = _open_store(settings)
    store.accept(identifier, count)
    store.save()
    console.print(f"Recorded {identifier} = {count} in {store.path}", markup=False)


def main() -> None:
    """Entry point for the Typer CLI."""
    app()
