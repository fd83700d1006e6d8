"""Tests for the lifecycle state machine and its event ordering rules."""

import pytest

from gherkin_portal.errors import EventOrderError
from gherkin_portal.events.models import Match, Result, Scenario
from gherkin_portal.state.models import (
    FeatureState,
    HookWindow,
    ItemStatus,
    ItemType,
    ReporterPhase,
)

from conftest import make_examples, make_step, run_scenario

URI = "features/login.feature"


@pytest.fixture
def open_feature(reporter, feature):
    """Reporter with a launch and feature already open."""
    reporter.uri(URI)
    reporter.feature(feature)
    return reporter


def messages(item):
    return [log.message for log in item.logs]


class TestHierarchy:
    """Test node creation for launch, root, feature and scenario."""

    def test_launch_root_feature_scenario(self, open_feature, backend, scenario):
        run_scenario(open_feature, scenario, ["passed"])

        assert list(backend.launches) == ["launch-1"]
        root = backend.items_named("Root User Story")[0]
        assert root.parent_id is None
        assert root.request.item_type is ItemType.STORY
        assert root.request.description == URI

        feature_item = backend.items_named("Feature: Login")[0]
        assert feature_item.parent_id == root.item_id
        assert feature_item.request.item_type is ItemType.SUITE
        assert feature_item.request.description == URI
        assert feature_item.request.tags == frozenset({"@smoke", "@auth"})

        scenario_item = backend.items_named("Scenario: Valid credentials")[0]
        assert scenario_item.parent_id == feature_item.item_id
        assert scenario_item.request.item_type is ItemType.TEST
        assert scenario_item.request.description == f"{URI}:5"
        assert scenario_item.request.tags == frozenset({"@happy"})
        assert scenario_item.finish.status is ItemStatus.PASSED

    def test_launch_started_once(self, reporter, backend, feature):
        reporter.uri(URI)
        reporter.feature(feature)
        reporter.eof()
        reporter.uri("features/other.feature")
        reporter.feature(feature)
        reporter.eof()

        launch_starts = [c for c in backend.calls if c.operation == "start_launch"]
        assert len(launch_starts) == 1
        assert len(backend.items_named("Root User Story")) == 1
        assert len(backend.items_named("Feature: Login")) == 2

    def test_start_launch_is_idempotent(self, reporter, backend):
        reporter.machine.start_launch()
        reporter.machine.start_launch()
        assert len(backend.launches) == 1

    def test_feature_closes_without_status(self, open_feature, backend):
        open_feature.eof()

        feature_item = backend.items_named("Feature: Login")[0]
        assert feature_item.closed
        assert feature_item.finish.status is None
        assert feature_item.finish.issue is None

    def test_phases(self, open_feature, scenario):
        machine = open_feature.machine
        assert machine.phase is ReporterPhase.FEATURE_OPEN

        open_feature.start_of_scenario_lifecycle(scenario)
        assert machine.phase is ReporterPhase.HOOK_ACTIVE

        open_feature.scenario(scenario)
        assert machine.phase is ReporterPhase.SCENARIO_OPEN

        open_feature.step(make_step("one"))
        open_feature.match(Match(location="steps.py:1"))
        assert machine.phase is ReporterPhase.STEP_ACTIVE

        open_feature.result(Result(status="passed"))
        assert machine.phase is ReporterPhase.HOOK_ACTIVE

        open_feature.end_of_scenario_lifecycle(scenario)
        assert machine.phase is ReporterPhase.FEATURE_OPEN

        open_feature.eof()
        assert machine.phase is ReporterPhase.LAUNCH_OPEN

        open_feature.close()
        assert machine.phase is ReporterPhase.IDLE


class TestCloseOrdering:
    """Test that every node closes after its children and exactly once."""

    def test_close_finishes_everything(self, open_feature, backend, scenario):
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        open_feature.close()

        assert all(item.closed for item in backend.items.values())
        assert backend.launches["launch-1"]["finish"] is not None
        assert open_feature.machine.scenario is None
        assert open_feature.machine.feature is None

    def test_finish_is_last_call_per_node(self, open_feature, backend, scenario):
        run_scenario(open_feature, scenario, ["passed", "failed"])
        open_feature.eof()
        open_feature.close()

        for item_id in backend.items:
            touching = [i for i, c in enumerate(backend.calls) if c.target == item_id]
            finishes = [i for i, c in enumerate(backend.calls)
                        if c.target == item_id and c.operation == "finish_item"]
            assert len(finishes) == 1
            assert finishes[0] == touching[-1]

    def test_children_close_before_parents(self, open_feature, backend, scenario):
        run_scenario(open_feature, scenario, ["passed"])
        open_feature.eof()
        open_feature.close()

        finish_order = [c.target for c in backend.calls if c.operation == "finish_item"]
        for item in backend.items.values():
            if item.parent_id is not None:
                assert finish_order.index(item.item_id) < finish_order.index(item.parent_id)


class TestAfterHookGuard:
    """Test when the after-hook window may open."""

    def test_opens_after_last_step(self, open_feature, scenario):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        open_feature.step(make_step("one"))
        open_feature.step(make_step("two"))

        open_feature.match(Match())
        open_feature.result(Result(status="passed"))
        assert machine.scenario.after_hooks is HookWindow.PENDING

        open_feature.match(Match())
        open_feature.result(Result(status="passed"))
        assert machine.scenario.after_hooks is HookWindow.OPEN

    def test_background_steps_do_not_open_window(self, open_feature, scenario, background):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.background(background)
        open_feature.step(make_step("logged out"))
        open_feature.match(Match())
        open_feature.result(Result(status="passed"))

        # Cursor is drained but the block is still the background
        assert machine.scenario.cursor.exhausted
        assert machine.scenario.after_hooks is HookWindow.PENDING

        open_feature.scenario(scenario)
        open_feature.step(make_step("log in", keyword="When "))
        open_feature.match(Match())
        open_feature.result(Result(status="passed"))
        assert machine.scenario.after_hooks is HookWindow.OPEN

    def test_explicit_open_refused_while_steps_remain(self, open_feature, scenario):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        open_feature.step(make_step("one"))

        open_feature.hooks_begin(False)
        assert machine.scenario.after_hooks is HookWindow.PENDING

    def test_window_opens_at_most_once(self, open_feature, scenario):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        open_feature.hooks_begin(False)
        open_feature.hooks_end(False)
        open_feature.hooks_begin(False)

        assert machine.scenario.after_hooks is HookWindow.CLOSED

    def test_after_hook_opens_pending_window(self, open_feature, scenario):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        open_feature.after(Match(location="hooks.py:20"), Result(status="passed"))

        assert machine.scenario.after_hooks is HookWindow.OPEN


class TestBackground:
    """Test background block handling."""

    def test_background_closes_before_hooks(self, open_feature, scenario, background):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        assert machine.scenario.before_hooks is HookWindow.OPEN

        open_feature.background(background)
        assert machine.scenario.before_hooks is HookWindow.CLOSED
        assert machine.scenario.in_background
        assert machine.scenario.step_prefix == "BACKGROUND: "

    def test_background_steps_are_prefixed(self, open_feature, backend, scenario, background):
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.background(background)
        open_feature.step(make_step("logged out"))
        open_feature.match(Match())
        open_feature.result(Result(status="passed"))
        open_feature.scenario(scenario)
        open_feature.step(make_step("log in", keyword="When "))
        open_feature.match(Match())
        open_feature.result(Result(status="passed"))
        open_feature.end_of_scenario_lifecycle(scenario)

        logged = messages(backend.items_named("Scenario: Valid credentials")[0])
        assert any("BACKGROUND: Given logged out" in m for m in logged)
        assert any(m.endswith("When log in-------------------------") for m in logged)
        assert not any("BACKGROUND: When" in m for m in logged)

    def test_background_requires_scenario(self, open_feature, background):
        with pytest.raises(EventOrderError):
            open_feature.machine.enter_background(background)


class TestStatusAggregation:
    """Test scenario status folding through the reporter."""

    @pytest.mark.parametrize("outcomes,expected", [
        (["passed", "passed"], ItemStatus.PASSED),
        (["passed", "skipped"], ItemStatus.SKIPPED),
        (["skipped", "passed"], ItemStatus.SKIPPED),
        (["passed", "failed"], ItemStatus.FAILED),
        (["failed", "passed"], ItemStatus.FAILED),
        (["skipped", "failed", "skipped"], ItemStatus.FAILED),
        (["undefined"], ItemStatus.FAILED),
    ])
    def test_final_status(self, open_feature, backend, scenario, outcomes, expected):
        run_scenario(open_feature, scenario, outcomes)
        item = backend.items_named("Scenario: Valid credentials")[0]
        assert item.finish.status is expected

    def test_failed_hook_fails_scenario(self, open_feature, backend, scenario):
        run_scenario(open_feature, scenario, ["passed"], after_hooks=["failed"])
        item = backend.items_named("Scenario: Valid credentials")[0]
        assert item.finish.status is ItemStatus.FAILED

    def test_no_steps_passes(self, open_feature, backend, scenario):
        run_scenario(open_feature, scenario, [])
        item = backend.items_named("Scenario: Valid credentials")[0]
        assert item.finish.status is ItemStatus.PASSED
        assert item.finish.issue is None


class TestOutOfOrderEvents:
    """Test events arriving in a phase that cannot accept them."""

    def test_match_without_scenario_raises(self, open_feature):
        with pytest.raises(EventOrderError) as exc_info:
            open_feature.machine.match_step(Match())
        assert exc_info.value.event == "match"

    def test_reporter_swallows_order_errors(self, reporter, backend):
        reporter.match(Match())
        reporter.result(Result(status="passed"))
        reporter.end_of_scenario_lifecycle(Scenario(keyword="Scenario", name="ghost"))
        reporter.eof()

        assert backend.calls == []
        assert reporter.machine.phase is ReporterPhase.IDLE

    def test_match_past_declared_steps_leaves_state(self, open_feature, scenario):
        machine = open_feature.machine
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        before = machine.scenario

        with pytest.raises(EventOrderError):
            machine.match_step(Match(location="steps.py:99"))
        assert machine.scenario == before

    def test_scenario_requires_feature(self, reporter, scenario):
        with pytest.raises(EventOrderError):
            reporter.machine.start_scenario(scenario)

    def test_undeclared_step_outside_scenario_ignored(self, open_feature):
        open_feature.machine.declare_step(make_step("template step"))
        assert open_feature.machine.scenario is None


class TestEarlyEnd:
    """Test scenarios that end before all declared steps ran."""

    def test_remaining_steps_discarded(self, open_feature, backend, scenario):
        open_feature.start_of_scenario_lifecycle(scenario)
        open_feature.scenario(scenario)
        for name in ("one", "two", "three"):
            open_feature.step(make_step(name))
        open_feature.match(Match())
        open_feature.result(Result(status="failed", error_message="boom"))
        open_feature.end_of_scenario_lifecycle(scenario)

        item = backend.items_named("Scenario: Valid credentials")[0]
        assert item.closed
        assert item.finish.status is ItemStatus.FAILED
        assert open_feature.machine.scenario is None

        # Next scenario starts with a fresh cursor
        open_feature.start_of_scenario_lifecycle(scenario)
        assert open_feature.machine.scenario.cursor.steps == ()

    def test_new_scenario_closes_previous(self, open_feature, backend, scenario):
        open_feature.start_of_scenario_lifecycle(scenario)
        other = Scenario(keyword="Scenario", name="Other", line=9)
        open_feature.start_of_scenario_lifecycle(other)

        assert backend.items_named("Scenario: Valid credentials")[0].closed
        assert open_feature.machine.scenario.name == "Scenario: Other"


class TestOutlines:
    """Test outline iteration suffixes."""

    def test_suffixes_per_example_row(self, open_feature, backend):
        outline = Scenario(keyword="Scenario Outline", name="Outline Demo", line=12)
        open_feature.examples(make_examples(3))
        run_scenario(open_feature, outline, ["passed"])
        run_scenario(open_feature, outline, ["passed"])
        run_scenario(open_feature, outline, ["passed"])

        names = [item.request.name for item in backend.items.values()
                 if item.request.item_type is ItemType.TEST]
        assert names == [
            "Scenario Outline: Outline Demo [1]",
            "Scenario Outline: Outline Demo [2]",
            "Scenario Outline: Outline Demo",
        ]

    def test_suffixes_reset_per_feature(self, open_feature, backend, feature, scenario):
        open_feature.examples(make_examples(4))
        open_feature.eof()
        open_feature.feature(feature)
        run_scenario(open_feature, scenario, ["passed"])

        assert backend.items_named("Scenario: Valid credentials")

    def test_feature_state_holds_node_and_uri(self, open_feature, backend):
        open_feature.examples(make_examples(3))

        feature_item = backend.items_named("Feature: Login")[0]
        assert open_feature.machine.feature == FeatureState(
            item_id=feature_item.item_id, uri=URI,
        )
