#!/usr/bin/env python3
"""
Basic Usage Example - Gherkin Portal Reporter

This script drives the reporter by hand with the callbacks a Cucumber-style
engine would emit, reporting into the in-memory backend. It shows how to:
- Build a reporter for one run
- Feed feature, scenario, step and hook events
- Inspect the resulting launch hierarchy

Run: python examples/basic_usage.py
"""

from gherkin_portal.backend.memory_backend import InMemoryReportingBackend
from gherkin_portal.events.models import (
    DataTableRow,
    Feature,
    Match,
    Result,
    Scenario,
    Step,
    Tag,
)
from gherkin_portal.logging.config import configure_logging
from gherkin_portal.reporter import GherkinReporter


def run_login_feature(reporter: GherkinReporter) -> None:
    """Emit the events of a one-scenario feature."""
    scenario = Scenario(keyword="Scenario", name="Valid credentials", line=4)
    steps = [
        Step(keyword="Given ", name="the users", line=5,
             rows=(DataTableRow(cells=("name", "role")), DataTableRow(cells=("ann", "admin")))),
        Step(keyword="When ", name="ann logs in", line=8),
        Step(keyword="Then ", name="the dashboard is shown", line=9),
    ]

    reporter.uri("features/login.feature")
    reporter.feature(Feature(keyword="Feature", name="Login", line=1, tags=(Tag("@auth"),)))

    reporter.start_of_scenario_lifecycle(scenario)
    reporter.before(Match(location="hooks.py:3"), Result(status="passed"))
    reporter.scenario(scenario)
    for step in steps:
        reporter.step(step)

    outcomes = ["passed", "passed", "pending"]
    for step, outcome in zip(steps, outcomes):
        reporter.match(Match(location=f"steps.py:{step.line}"))
        reporter.result(Result(status=outcome))

    reporter.embedding("text/plain", b"screenshot placeholder")
    reporter.after(Match(location="hooks.py:12"), Result(status="passed"))
    reporter.end_of_scenario_lifecycle(scenario)
    reporter.eof()


def print_tree(backend: InMemoryReportingBackend, parent_id=None, depth=0) -> None:
    for item in backend.children_of(parent_id):
        status = item.finish.status.value if item.finish and item.finish.status else "-"
        print(f"{'  ' * depth}{item.request.name} [{item.request.item_type.value}] {status}")
        for log in item.logs:
            first_line = log.message.strip().splitlines()[0] if log.message.strip() else ""
            print(f"{'  ' * (depth + 1)}log {log.level.value}: {first_line}")
        print_tree(backend, item.item_id, depth + 1)


def main():
    configure_logging(level="WARNING")

    for flavor in ("scenario", "step"):
        backend = InMemoryReportingBackend()
        reporter = GherkinReporter.create(
            overrides={"reporter": {"flavor": flavor}, "logging": {"level": "WARNING"}},
            environ={},
            backend=backend,
        )

        run_login_feature(reporter)
        reporter.close()

        print(f"=== {flavor} flavor ===")
        print_tree(backend)
        print(backend.summary())
        print()


if __name__ == "__main__":
    main()
