"""
Reporting flavors: how scenarios, steps and hooks map onto reporting nodes.

A flavor is a strategy object supplied per run. The state machine decides
when something happens; the flavor decides which nodes and log entries that
produces. Flavors hold only the identifiers of the nodes they open themselves
(root, step, hook window).
"""

from typing import TYPE_CHECKING, Optional, Protocol

from ..config.defaults import ReporterParams
from ..events.models import Match, Result, Step
from ..logging.config import get_state_logger
from ..rules.rendering import build_multiline_argument, build_statement_name
from ..rules.status import build_issue_comment, join_status, map_status
from .models import ItemStatus, ItemType, LogLevel

if TYPE_CHECKING:
    from .machine import LifecycleStateMachine

logger = get_state_logger(__name__)

STEP_SEPARATOR = "-------------------------"


class ReportingFlavor(Protocol):
    """Capabilities the state machine needs from a reporting flavor."""

    feature_type: ItemType
    scenario_type: ItemType

    @property
    def root_node_id(self) -> Optional[str]: ...

    def start_root(self, run: "LifecycleStateMachine") -> None: ...

    def finish_root(self, run: "LifecycleStateMachine") -> None: ...

    def log_target(self, run: "LifecycleStateMachine") -> Optional[str]: ...

    def begin_step(self, run: "LifecycleStateMachine", step: Step) -> None: ...

    def finish_step(self, run: "LifecycleStateMachine", result: Result) -> None: ...

    def open_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None: ...

    def close_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None: ...

    def hook_finished(self, run: "LifecycleStateMachine", match: Match,
                      result: Result, is_before: bool) -> None: ...

    def release_scenario(self, run: "LifecycleStateMachine") -> None: ...


class ScenarioFlavor:
    """
    Scenarios are the leaves; steps become log entries of their scenario.

    Features hang below a synthetic root story so that every launch has a
    single top-level node.
    """

    feature_type = ItemType.SUITE
    scenario_type = ItemType.TEST

    def __init__(self, root_item_name: str = ReporterParams.root_item_name):
        self.root_item_name = root_item_name
        self._root_id: Optional[str] = None

    @property
    def root_node_id(self) -> Optional[str]:
        return self._root_id

    def start_root(self, run: "LifecycleStateMachine") -> None:
        self._root_id = run.service.start_item(
            run.launch_id, None, self.root_item_name, ItemType.STORY,
            description=run.feature_uri,
        )

    def finish_root(self, run: "LifecycleStateMachine") -> None:
        run.service.finish_item(self._root_id)
        self._root_id = None

    def log_target(self, run: "LifecycleStateMachine") -> Optional[str]:
        return run.scenario.item_id if run.scenario else None

    def begin_step(self, run: "LifecycleStateMachine", step: Step) -> None:
        prefix = run.scenario.step_prefix if run.scenario else ""
        name = build_statement_name(step, prefix=prefix, infix="")
        run.service.send_log(
            self.log_target(run),
            decorate_message(name) + build_multiline_argument(step),
            LogLevel.INFO,
        )

    def finish_step(self, run: "LifecycleStateMachine", result: Result) -> None:
        run.report_result(result, decorate_message(f"STEP {result.status.upper()}"))

    def open_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None:
        pass

    def close_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None:
        pass

    def hook_finished(self, run: "LifecycleStateMachine", match: Match,
                      result: Result, is_before: bool) -> None:
        run.report_result(result, None)

    def release_scenario(self, run: "LifecycleStateMachine") -> None:
        pass


class StepFlavor:
    """
    Steps and hook windows are nodes of their own below the scenario.

    Features attach directly to the launch. Log entries go to the open step,
    else the open hook window, else the scenario.
    """

    feature_type = ItemType.SUITE
    scenario_type = ItemType.TEST

    def __init__(self):
        self._step_id: Optional[str] = None
        self._hook_id: Optional[str] = None
        self._hook_status = ItemStatus.PASSED

    @property
    def root_node_id(self) -> Optional[str]:
        return None

    def start_root(self, run: "LifecycleStateMachine") -> None:
        pass

    def finish_root(self, run: "LifecycleStateMachine") -> None:
        pass

    def log_target(self, run: "LifecycleStateMachine") -> Optional[str]:
        if self._step_id is not None:
            return self._step_id
        if self._hook_id is not None:
            return self._hook_id
        return run.scenario.item_id if run.scenario else None

    def begin_step(self, run: "LifecycleStateMachine", step: Step) -> None:
        self._close_dangling_step(run)
        prefix = run.scenario.step_prefix if run.scenario else ""
        self._step_id = run.service.start_item(
            run.launch_id,
            run.scenario.item_id if run.scenario else None,
            build_statement_name(step, prefix=prefix, infix=""),
            ItemType.STEP,
            description=build_multiline_argument(step),
        )

    def finish_step(self, run: "LifecycleStateMachine", result: Result) -> None:
        run.report_result(result, None)
        run.service.finish_item(
            self._step_id,
            map_status(result.status),
            build_issue_comment(result.status) or "",
        )
        self._step_id = None

    def open_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None:
        self._hook_id = run.service.start_item(
            run.launch_id,
            run.scenario.item_id if run.scenario else None,
            "Before hooks" if is_before else "After hooks",
            ItemType.BEFORE_TEST if is_before else ItemType.AFTER_TEST,
        )
        self._hook_status = ItemStatus.PASSED

    def close_hooks(self, run: "LifecycleStateMachine", is_before: bool) -> None:
        run.service.finish_item(self._hook_id, self._hook_status)
        self._hook_id = None
        self._hook_status = ItemStatus.PASSED

    def hook_finished(self, run: "LifecycleStateMachine", match: Match,
                      result: Result, is_before: bool) -> None:
        label = "@Before" if is_before else "@After"
        run.report_result(result, f"{label}\n{match.location}")
        self._hook_status = join_status(self._hook_status, map_status(result.status))

    def _close_dangling_step(self, run: "LifecycleStateMachine") -> None:
        if self._step_id is not None:
            logger.warning("Closing step that never received a result", item_id=self._step_id)
            run.service.finish_item(self._step_id, ItemStatus.FAILED)
            self._step_id = None

    def release_scenario(self, run: "LifecycleStateMachine") -> None:
        # Children must close before the scenario does
        self._close_dangling_step(run)
        if self._hook_id is not None:
            run.service.finish_item(self._hook_id, self._hook_status)
            self._hook_id = None
            self._hook_status = ItemStatus.PASSED


def decorate_message(message: str) -> str:
    return f"{STEP_SEPARATOR}{message}{STEP_SEPARATOR}"


def build_flavor(params: ReporterParams) -> ReportingFlavor:
    """Create the flavor named in the reporter parameters."""
    if params.flavor == "step":
        return StepFlavor()
    return ScenarioFlavor(root_item_name=params.root_item_name)
