"""Tests for the scenario runner and verify_site."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest

from sitecheck.events import RunCompleted, RunStarted, ScenarioFinished, ScenarioStarted
from sitecheck.exceptions import CheckFailed, RenderError, SetupError
from sitecheck.runner import Outcome, RunSummary, ScenarioResult, run_scenario, run_scenarios, verify_site
from sitecheck.scenarios import Scenario
from tests.factories import (
    make_component_html,
    make_docs_tree,
    make_render,
    make_result,
    make_session_factory,
    make_settings,
)


def scenario(name: str, check, timeout: float = 5.0) -> Scenario:
    return Scenario(name=name, path=f"/{name}", check=check, timeout=timeout)


async def passing(render) -> None:
    await render("/")


async def failing(render) -> None:
    raise CheckFailed("heading mismatch")


async def unrenderable(render) -> None:
    raise RenderError("http://127.0.0.1:3000/x", TimeoutError("nav"), OSError("refused"))


async def crashing(render) -> None:
    raise KeyError("boom")


async def hanging(render) -> None:
    await asyncio.sleep(10)


class TestRunScenario:
    """Tests for run_scenario."""

    @pytest.mark.asyncio
    async def test_passed(self) -> None:
        result = await run_scenario(scenario("ok", passing), make_render({}))

        assert result.outcome == Outcome.PASSED
        assert result.passed

    @pytest.mark.asyncio
    async def test_assertion_is_failed(self) -> None:
        result = await run_scenario(scenario("bad", failing), make_render({}))

        assert result.outcome == Outcome.FAILED
        assert result.message == "heading mismatch"

    @pytest.mark.asyncio
    async def test_render_error_is_error(self) -> None:
        result = await run_scenario(scenario("down", unrenderable), make_render({}))

        assert result.outcome == Outcome.ERROR
        assert "refused" in result.message

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_error(self) -> None:
        result = await run_scenario(scenario("crash", crashing), make_render({}))

        assert result.outcome == Outcome.ERROR
        assert result.message.startswith("KeyError")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        result = await run_scenario(scenario("slow", hanging, timeout=0.05), make_render({}))

        assert result.outcome == Outcome.TIMEOUT

    @pytest.mark.asyncio
    async def test_logs_carry_scenario_name(self, log_output) -> None:
        await run_scenario(scenario("Overview en", passing), make_render({}))

        events = [json.loads(line) for line in log_output.getvalue().splitlines()]
        finished = [e for e in events if e["event"] == "scenario_finished"]
        assert finished[0]["scenario"] == "Overview en"
        assert finished[0]["outcome"] == "passed"


class TestRunScenarios:
    """Tests for run_scenarios."""

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_siblings(self) -> None:
        scenarios = [scenario("a", passing), scenario("b", unrenderable), scenario("c", passing)]

        summary = await run_scenarios(scenarios, make_render({}))

        assert [r.outcome for r in summary.results] == [Outcome.PASSED, Outcome.ERROR, Outcome.PASSED]
        assert [r.name for r in summary.failures] == ["b"]
        assert not summary.ok

    @pytest.mark.asyncio
    async def test_both_strategies_failing_fails_only_that_scenario(self) -> None:
        """A page whose browser render and fetch both fail fails alone."""
        render = make_render(
            {
                "/components/button/": RenderError("http://x/components/button/", OSError(), OSError()),
                "/components/alert/": make_result(make_component_html("Alert")),
            }
        )

        def page(path):
            async def check(render_fn):
                result = await render_fn(path)
                assert result.status == 200

            return check

        scenarios = [
            scenario("button", page("/components/button/")),
            scenario("alert", page("/components/alert/")),
        ]

        summary = await run_scenarios(scenarios, render)

        assert summary.results[0].outcome == Outcome.ERROR
        assert summary.results[1].outcome == Outcome.PASSED

    @pytest.mark.asyncio
    async def test_order_does_not_change_outcomes(self) -> None:
        scenarios = [scenario("a", passing), scenario("b", failing), scenario("c", crashing)]

        forward = await run_scenarios(scenarios, make_render({}))
        backward = await run_scenarios(list(reversed(scenarios)), make_render({}))

        outcomes = {r.name: r.outcome for r in forward.results}
        assert outcomes == {r.name: r.outcome for r in backward.results}

    @pytest.mark.asyncio
    async def test_emits_events(self) -> None:
        events = []

        await run_scenarios(
            [scenario("a", passing), scenario("b", failing)],
            make_render({}),
            on_event=events.append,
        )

        assert [type(e) for e in events] == [
            ScenarioStarted,
            ScenarioFinished,
            ScenarioStarted,
            ScenarioFinished,
        ]
        assert events[2].index == 1
        assert events[3].result.outcome == Outcome.FAILED

    @pytest.mark.asyncio
    async def test_runs_sequentially(self) -> None:
        active = 0
        peak = 0

        async def tracked(render) -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await run_scenarios([scenario(str(i), tracked) for i in range(5)], make_render({}))

        assert peak == 1


class TestRunSummary:
    """Tests for RunSummary."""

    def test_to_dict(self) -> None:
        summary = RunSummary(
            [
                ScenarioResult("a", Outcome.PASSED, elapsed_ms=10),
                ScenarioResult("b", Outcome.TIMEOUT, "Exceeded 15s", 15000),
            ]
        )

        data = summary.to_dict()

        assert data["total"] == 2
        assert data["passed"] == 1
        assert data["failed"] == 1
        assert data["results"][1] == {
            "name": "b",
            "outcome": "timeout",
            "message": "Exceeded 15s",
            "elapsed_ms": 15000,
        }


class TestVerifySite:
    """Tests for verify_site."""

    @pytest.fixture
    def docs(self, tmp_path):
        make_docs_tree(tmp_path, ["components/button/index.en-US.md", "components/button/index.zh-CN.md"])
        return tmp_path

    def site_pages(self, tables: int = 1) -> dict:
        return {
            "/": make_result("<title>Ant Design</title>"),
            "/index-cn": make_result("<title>Ant Design</title>"),
            "/components/overview": make_result("<h1>Overview</h1>"),
            "/components/overview-cn": make_result("<h1>组件总览</h1>"),
            "/docs/resources": make_result("<h1>Resources</h1>"),
            "/docs/resources-cn": make_result("<h1>资源</h1>"),
            "/components/button/": make_result(make_component_html("Button", tables=tables)),
            "/components/button-cn/": make_result(make_component_html("Button 按钮", tables=tables)),
        }

    def patched_render(self, pages: dict):
        canned = make_render(pages)

        async def render(session, path):
            return await canned(path)

        return patch("sitecheck.runner.render", render)

    @pytest.mark.asyncio
    async def test_update_then_verify(self, docs) -> None:
        settings = make_settings(docs, update_baselines=True)
        with self.patched_render(self.site_pages(tables=2)):
            first = await verify_site(settings, session_factory=make_session_factory())
            second = await verify_site(
                make_settings(docs), session_factory=make_session_factory()
            )

        assert first.ok and first.total == 8
        assert second.ok
        saved = json.loads(settings.resolved_baseline_path().read_text(encoding="utf-8"))
        assert saved["table_counts"] == {"components/button": 2, "components/button-cn": 2}

    @pytest.mark.asyncio
    async def test_table_regression_fails_component_scenarios(self, docs) -> None:
        with self.patched_render(self.site_pages(tables=2)):
            await verify_site(make_settings(docs, update_baselines=True), session_factory=make_session_factory())
        with self.patched_render(self.site_pages(tables=1)):
            summary = await verify_site(make_settings(docs), session_factory=make_session_factory())

        assert [r.name for r in summary.failures] == [
            "Component components/button zh Page",
            "Component components/button en Page",
        ]

    @pytest.mark.asyncio
    async def test_session_closed_after_failures(self, docs) -> None:
        lifecycle: list[str] = []
        with self.patched_render({}):
            summary = await verify_site(make_settings(docs), session_factory=make_session_factory(events=lifecycle))

        assert not summary.ok
        assert lifecycle == ["open", "close"]

    @pytest.mark.asyncio
    async def test_setup_error_runs_nothing(self, docs) -> None:
        @asynccontextmanager
        async def broken(settings):
            raise SetupError("Cannot launch Chromium")
            yield  # pragma: no cover

        events = []
        with pytest.raises(SetupError):
            await verify_site(make_settings(docs), on_event=events.append, session_factory=broken)

        assert events == []

    @pytest.mark.asyncio
    async def test_emits_run_events(self, docs) -> None:
        events = []
        with self.patched_render(self.site_pages()):
            await verify_site(
                make_settings(docs, update_baselines=True),
                on_event=events.append,
                session_factory=make_session_factory(base_url="http://127.0.0.1:4000"),
            )

        assert isinstance(events[0], RunStarted)
        assert events[0].total == 8
        assert events[0].base_url == "http://127.0.0.1:4000"
        assert isinstance(events[-1], RunCompleted)
        assert events[-1].summary.ok
