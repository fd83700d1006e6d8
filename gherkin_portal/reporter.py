"""
Host-facing Gherkin reporter.

Receives the formatter/reporter callbacks of the test engine and translates
each one into lifecycle state machine operations. Reporting is a side channel
to test execution: no callback lets an exception escape into the host run.
"""

import functools
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, TypeVar

from .backend.base import ReportingBackend
from .backend.memory_backend import InMemoryReportingBackend
from .context import ReportingContext
from .errors import BackendConfigurationError, ConsistencyError
from .events.models import (
    Background,
    Examples,
    Feature,
    Match,
    Result,
    Scenario,
    ScenarioOutline,
    Step,
)
from .logging.config import configure_logging, get_logger
from .state.machine import LifecycleStateMachine

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., None])


def guarded(method: F) -> F:
    """Keep reporter failures out of the host test run."""

    @functools.wraps(method)
    def wrapper(self: "GherkinReporter", *args: Any, **kwargs: Any) -> None:
        try:
            method(self, *args, **kwargs)
        except ConsistencyError as e:
            self.logger.warning(
                "Lifecycle event ignored",
                callback=method.__name__,
                reason=str(e),
                phase=self.machine.phase.value,
            )
        except Exception:
            self.logger.exception(
                "Unexpected error while reporting event",
                callback=method.__name__,
                phase=self.machine.phase.value,
            )

    return wrapper  # type: ignore[return-value]


class GherkinReporter:
    """
    Formatter and reporter callbacks for one test run.

    Each parallel worker of the host must own its own reporter instance.
    """

    def __init__(self, context: ReportingContext):
        self.logger = logger
        self.context = context
        self.machine = LifecycleStateMachine(context)

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        backend: Optional[ReportingBackend] = None
    ) -> "GherkinReporter":
        """
        Build a reporter from configuration.

        The configured logging section is applied to the reporter's own
        diagnostics. An unusable configuration does not stop the run: the
        reporter falls back to the in-memory backend and logs why.
        """
        try:
            context = ReportingContext.create(
                config_dir=config_dir,
                overrides=overrides,
                environ=environ,
                backend=backend,
            )
            configure_logging(
                level=context.config.logging.level,
                format_json=context.config.logging.format_json,
            )
        except BackendConfigurationError as e:
            logger.error(
                "Reporting disabled, falling back to in-memory backend",
                reason=str(e),
                fields=e.missing_fields,
            )
            context = ReportingContext.from_parts(None, InMemoryReportingBackend())
        return cls(context)

    # Formatter callbacks

    @guarded
    def uri(self, uri: str) -> None:
        self.machine.set_feature_uri(uri)

    @guarded
    def feature(self, feature: Feature) -> None:
        self.machine.start_feature(feature)

    @guarded
    def scenario_outline(self, scenario_outline: ScenarioOutline) -> None:
        self.logger.debug("Scenario outline declared", name=scenario_outline.name)

    @guarded
    def examples(self, examples: Examples) -> None:
        self.machine.declare_examples(examples)

    @guarded
    def start_of_scenario_lifecycle(self, scenario: Scenario) -> None:
        self.machine.start_scenario(scenario)

    @guarded
    def background(self, background: Background) -> None:
        self.machine.enter_background(background)

    @guarded
    def scenario(self, scenario: Scenario) -> None:
        self.machine.enter_scenario_body(scenario)

    @guarded
    def step(self, step: Step) -> None:
        self.machine.declare_step(step)

    @guarded
    def end_of_scenario_lifecycle(self, scenario: Scenario) -> None:
        self.machine.finish_scenario()

    @guarded
    def eof(self) -> None:
        self.machine.finish_feature()

    @guarded
    def done(self) -> None:
        pass

    @guarded
    def close(self) -> None:
        self.machine.finish_launch()
        self.context.service.close()

    @guarded
    def syntax_error(self, state: str, event: str, legal_events: list[str],
                     uri: str, line: int) -> None:
        self.logger.warning(
            "Gherkin syntax error reported by engine",
            state=state,
            syntax_event=event,
            legal_events=legal_events,
            uri=uri,
            line=line,
        )

    # Reporter callbacks

    @guarded
    def before(self, match: Match, result: Result) -> None:
        self.machine.hook_finished(match, result, True)

    @guarded
    def after(self, match: Match, result: Result) -> None:
        self.machine.hook_finished(match, result, False)

    @guarded
    def hooks_begin(self, is_before: bool) -> None:
        self.machine.open_hooks(is_before)

    @guarded
    def hooks_end(self, is_before: bool) -> None:
        self.machine.close_hooks(is_before)

    @guarded
    def match(self, match: Match) -> None:
        self.machine.match_step(match)

    @guarded
    def result(self, result: Result) -> None:
        self.machine.finish_step(result)

    @guarded
    def embedding(self, mime_type: str, data: bytes) -> None:
        self.machine.attach(mime_type, data)

    @guarded
    def write(self, text: str) -> None:
        self.machine.write(text)
