"""
Lifecycle state machine for the reporting hierarchy.

Consumes one lifecycle operation at a time, keeps the currently open feature
and scenario, aggregates step and hook outcomes into the scenario status, and
decides when each reporting node opens and closes. Backend failures never
surface here (the service swallows them); events that arrive in a phase that
cannot accept them raise EventOrderError before any state is touched.
"""

from typing import TYPE_CHECKING, Optional

from ..backend.base import Attachment
from ..errors import EventOrderError
from ..events.models import Background, Examples, Feature, Match, Result, Scenario, Step
from ..logging.config import get_state_logger, log_state_transition
from ..rules.rendering import (
    COLON_INFIX,
    build_statement_name,
    extract_tags,
    resolve_attachment_name,
)
from ..rules.status import build_issue_comment, join_status, map_level, map_status
from .models import (
    FeatureState,
    HookWindow,
    LogLevel,
    OutlineIterations,
    ReporterPhase,
    ScenarioState,
)

if TYPE_CHECKING:
    from ..context import ReportingContext

state_logger = get_state_logger(__name__)


class LifecycleStateMachine:
    """
    Maps lifecycle operations onto launch, item and log calls.

    Phases: IDLE → LAUNCH_OPEN → FEATURE_OPEN → SCENARIO_OPEN →
    (STEP_ACTIVE | HOOK_ACTIVE)* → SCENARIO_OPEN → FEATURE_OPEN → … → IDLE
    """

    def __init__(self, context: "ReportingContext"):
        self.context = context
        self.service = context.service
        self.flavor = context.flavor
        self.logger = state_logger

        self.phase = ReporterPhase.IDLE
        self.launch_started = False
        self.launch_id: Optional[str] = None
        self.feature_uri = ""
        self.feature: Optional[FeatureState] = None
        self.scenario: Optional[ScenarioState] = None
        self._pending_iterations = OutlineIterations()

    # Phase bookkeeping

    def _transition(self, to_phase: ReporterPhase, trigger: str, **context) -> None:
        if to_phase is self.phase:
            return
        log_state_transition(
            self.logger,
            from_state=self.phase.value,
            to_state=to_phase.value,
            trigger=trigger,
            context=context or None,
        )
        self.phase = to_phase

    def _require_scenario(self, event: str) -> ScenarioState:
        if self.scenario is None:
            raise EventOrderError(
                f"'{event}' received while no scenario is open",
                event=event,
                current_state=self.phase.value,
            )
        return self.scenario

    def _require_feature(self, event: str) -> FeatureState:
        if self.feature is None:
            raise EventOrderError(
                f"'{event}' received while no feature is open",
                event=event,
                current_state=self.phase.value,
            )
        return self.feature

    # Launch

    def start_launch(self) -> None:
        """Open the launch and, if the flavor uses one, its root node."""
        if self.launch_started:
            return

        self.launch_started = True
        self.launch_id = self.service.start_launch(self.context.config.launch)
        self.flavor.start_root(self)
        self._transition(ReporterPhase.LAUNCH_OPEN, "start_launch", launch_id=self.launch_id)

    def finish_launch(self) -> None:
        """Close the root node and the launch, then return to IDLE."""
        if not self.launch_started:
            return

        if self.scenario is not None:
            self.logger.warning("Run ended inside an open scenario", scenario=self.scenario.name)
            self.finish_scenario()
        if self.feature is not None:
            self.logger.warning("Run ended inside an open feature", uri=self.feature.uri)
            self.finish_feature()

        self.flavor.finish_root(self)
        self.service.finish_launch(self.launch_id)

        self._transition(ReporterPhase.IDLE, "finish_launch", launch_id=self.launch_id)
        self.launch_started = False
        self.launch_id = None
        self.feature_uri = ""
        self._pending_iterations = OutlineIterations()

    # Feature

    def set_feature_uri(self, uri: str) -> None:
        self.feature_uri = uri

    def start_feature(self, feature: Feature) -> None:
        """Open the feature node below the flavor's root."""
        self.start_launch()

        if self.feature is not None:
            self.logger.warning("Feature started before previous one ended", uri=self.feature.uri)
            self.finish_feature()

        item_id = self.service.start_item(
            self.launch_id,
            self.flavor.root_node_id,
            build_statement_name(feature, infix=COLON_INFIX),
            self.flavor.feature_type,
            description=self.feature_uri,
            tags=extract_tags(feature.tags),
        )
        self.feature = FeatureState(item_id=item_id, uri=self.feature_uri)
        self._pending_iterations = OutlineIterations()
        self._transition(ReporterPhase.FEATURE_OPEN, "start_feature", item_id=item_id)

    def finish_feature(self) -> None:
        """Close the feature node; features carry no aggregated status."""
        feature = self._require_feature("finish_feature")

        if self.scenario is not None:
            self.logger.warning("Feature ended inside an open scenario", scenario=self.scenario.name)
            self.finish_scenario()

        self.service.finish_item(feature.item_id)
        self.feature = None
        self._pending_iterations = OutlineIterations()
        self._transition(
            ReporterPhase.LAUNCH_OPEN if self.launch_started else ReporterPhase.IDLE,
            "finish_feature",
            item_id=feature.item_id,
        )

    def declare_examples(self, examples: Examples) -> None:
        """Queue one name suffix per data row of an outline's examples."""
        self._pending_iterations = self._pending_iterations.extend(
            OutlineIterations.for_rows(len(examples.rows))
        )

    # Scenario

    def start_scenario(self, scenario: Scenario) -> None:
        """Open the scenario node and its before-hook window."""
        feature = self._require_feature("start_scenario")

        if self.scenario is not None:
            self.logger.warning("Scenario started before previous one ended", scenario=self.scenario.name)
            self.finish_scenario()

        suffix, self._pending_iterations = self._pending_iterations.pop()
        name = build_statement_name(scenario, infix=COLON_INFIX, suffix=suffix)
        item_id = self.service.start_item(
            self.launch_id,
            feature.item_id,
            name,
            self.flavor.scenario_type,
            description=f"{feature.uri}:{scenario.line}",
            tags=extract_tags(scenario.tags),
        )
        self.scenario = ScenarioState(item_id=item_id, name=name)
        self._transition(ReporterPhase.SCENARIO_OPEN, "start_scenario", item_id=item_id, name=name)

        self.open_hooks(True)

    def enter_background(self, background: Background) -> None:
        """Close the before-hook window and start prefixing background steps."""
        self._require_scenario("background")
        self.close_hooks(True)
        self.scenario = self.scenario.with_background(
            True, background.keyword.upper() + COLON_INFIX
        )

    def enter_scenario_body(self, scenario: Scenario) -> None:
        """Leave the background block (or close before hooks if there was none)."""
        current = self._require_scenario("scenario")
        if current.before_hooks is HookWindow.OPEN:
            self.close_hooks(True)
        self.scenario = self.scenario.with_background(False, "")

    def declare_step(self, step: Step) -> None:
        """Append a declared step; outline template steps are ignored."""
        if self.scenario is None:
            return
        self.scenario = self.scenario.with_cursor(self.scenario.cursor.declare(step))

    def match_step(self, match: Match) -> None:
        """Begin the next declared step."""
        scenario = self._require_scenario("match")
        step, cursor = scenario.cursor.advance()
        if step is None:
            raise EventOrderError(
                "Step matched but every declared step has already run",
                event="match",
                current_state=self.phase.value,
                context={"location": match.location},
            )

        self.scenario = scenario.with_cursor(cursor)
        self.flavor.begin_step(self, step)
        self._transition(ReporterPhase.STEP_ACTIVE, "match", step=step.name)

    def finish_step(self, result: Result) -> None:
        """Report a step result and open the after-hook window once due."""
        self._require_scenario("result")
        self.flavor.finish_step(self, result)
        self._transition(ReporterPhase.SCENARIO_OPEN, "result", status=result.status)

        if self.scenario is not None and self.scenario.after_hooks_due:
            self.open_hooks(False)

    def finish_scenario(self) -> None:
        """Close hook windows and the scenario node with its final status."""
        scenario = self._require_scenario("finish_scenario")

        for is_before in (True, False):
            if scenario.hook_window(is_before) is HookWindow.OPEN:
                self.close_hooks(is_before)
        self.flavor.release_scenario(self)

        scenario = self.scenario or scenario
        remaining = scenario.cursor.remaining
        if remaining:
            self.logger.debug(
                "Discarding steps that never ran",
                scenario=scenario.name,
                remaining=[step.name for step in remaining],
            )

        self.service.finish_item(scenario.item_id, scenario.status, scenario.issue_text)
        self.scenario = None
        self._transition(ReporterPhase.FEATURE_OPEN, "finish_scenario",
                         item_id=scenario.item_id, status=scenario.status.value)

    # Hooks

    def open_hooks(self, is_before: bool) -> None:
        """Open a hook window; each window opens at most once per scenario."""
        scenario = self._require_scenario("open_hooks")
        if scenario.hook_window(is_before) is not HookWindow.PENDING:
            return
        if not is_before and not scenario.after_hooks_due:
            return

        self.flavor.open_hooks(self, is_before)
        self.scenario = scenario.with_hook_window(is_before, HookWindow.OPEN)
        self._transition(ReporterPhase.HOOK_ACTIVE, "open_hooks", before=is_before)

    def close_hooks(self, is_before: bool) -> None:
        """Close a hook window; a window that never opened cannot open later."""
        scenario = self._require_scenario("close_hooks")
        window = scenario.hook_window(is_before)
        if window is HookWindow.CLOSED:
            return

        if window is HookWindow.OPEN:
            self.flavor.close_hooks(self, is_before)
        self.scenario = scenario.with_hook_window(is_before, HookWindow.CLOSED)
        self._transition(ReporterPhase.SCENARIO_OPEN, "close_hooks", before=is_before)

    def hook_finished(self, match: Match, result: Result, is_before: bool) -> None:
        """Report a single hook's outcome; the step cursor does not move."""
        scenario = self._require_scenario("hook_finished")
        if not is_before and scenario.after_hooks is HookWindow.PENDING:
            self.open_hooks(False)
        self.flavor.hook_finished(self, match, result, is_before)

    # Logging

    def report_result(self, result: Result, message: Optional[str]) -> None:
        """
        Log a step or hook outcome and fold it into the scenario status.

        The error message (if any) is logged before the message, both at the
        level mapped from the raw outcome.
        """
        level = map_level(result.status)
        target = self.flavor.log_target(self)

        if result.error_message:
            self.service.send_log(target, result.error_message, level)
        if message:
            self.service.send_log(target, message, level)

        if self.scenario is None:
            return

        scenario = self.scenario.with_status(
            join_status(self.scenario.status, map_status(result.status))
        )
        comment = build_issue_comment(result.status)
        if comment:
            scenario = scenario.with_issue_comment(comment)
        self.scenario = scenario

    def attach(self, mime_type: str, data: bytes) -> None:
        """Log binary content to the current log target."""
        name = resolve_attachment_name(mime_type)
        self.service.send_log(
            self.flavor.log_target(self),
            name,
            LogLevel.UNKNOWN,
            Attachment(name=name, content=data, mime_type=mime_type),
        )

    def write(self, text: str) -> None:
        """Log free text to the current log target."""
        self.service.send_log(self.flavor.log_target(self), text, LogLevel.INFO)
