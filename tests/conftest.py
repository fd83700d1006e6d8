"""Pytest configuration and shared fixtures."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from gherkin_portal.backend.memory_backend import InMemoryReportingBackend
from gherkin_portal.config.defaults import ReporterParams, get_default_config
from gherkin_portal.context import ReportingContext
from gherkin_portal.events.models import (
    Background,
    DataTableRow,
    DocString,
    Examples,
    Feature,
    Match,
    Result,
    Scenario,
    Step,
    Tag,
)
from gherkin_portal.reporter import GherkinReporter


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self):
        self._start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=next(self._ticks))


def make_context(backend, flavor: str = "scenario") -> ReportingContext:
    config = get_default_config()
    config = type(config)(
        launch=config.launch,
        backend=config.backend,
        reporter=ReporterParams(flavor=flavor),
        logging=config.logging,
    )
    return ReportingContext.from_parts(config, backend, clock=TickingClock())


@pytest.fixture
def backend() -> InMemoryReportingBackend:
    """Recording backend with no injected failures."""
    return InMemoryReportingBackend()


@pytest.fixture
def reporter(backend) -> GherkinReporter:
    """Scenario-flavor reporter writing into the recording backend."""
    return GherkinReporter(make_context(backend, "scenario"))


@pytest.fixture
def step_reporter(backend) -> GherkinReporter:
    """Step-flavor reporter writing into the recording backend."""
    return GherkinReporter(make_context(backend, "step"))


@pytest.fixture
def feature() -> Feature:
    return Feature(keyword="Feature", name="Login", line=1,
                   tags=(Tag("@smoke"), Tag("@auth"), Tag("@smoke")))


@pytest.fixture
def scenario() -> Scenario:
    return Scenario(keyword="Scenario", name="Valid credentials", line=5,
                    tags=(Tag("@happy"),))


@pytest.fixture
def background() -> Background:
    return Background(keyword="Background", name="Logged out", line=3)


def make_step(name: str, keyword: str = "Given ", rows=None, doc_string=None) -> Step:
    return Step(
        keyword=keyword,
        name=name,
        rows=tuple(DataTableRow(cells=tuple(r)) for r in rows) if rows is not None else None,
        doc_string=DocString(value=doc_string) if doc_string is not None else None,
    )


def make_examples(row_count: int) -> Examples:
    return Examples(
        keyword="Examples",
        name="",
        rows=tuple(DataTableRow(cells=(f"cell{i}",)) for i in range(row_count)),
    )


def run_scenario(reporter: GherkinReporter, scenario: Scenario, outcomes,
                 before_hooks=(), after_hooks=()) -> None:
    """Drive one scenario lifecycle the way the engine orders its callbacks."""
    reporter.start_of_scenario_lifecycle(scenario)
    for status in before_hooks:
        reporter.before(Match(location="hooks.py:10"), Result(status=status))
    reporter.scenario(scenario)
    for i, _ in enumerate(outcomes):
        reporter.step(make_step(f"step {i}"))
    for i, outcome in enumerate(outcomes):
        if isinstance(outcome, Result):
            result = outcome
        else:
            result = Result(status=outcome)
        reporter.match(Match(location=f"steps.py:{i}"))
        reporter.result(result)
    for status in after_hooks:
        reporter.after(Match(location="hooks.py:20"), Result(status=status))
    reporter.end_of_scenario_lifecycle(scenario)
