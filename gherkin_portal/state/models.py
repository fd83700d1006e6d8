"""
State machine data models for the reporting hierarchy.

This module defines the status lattice, item types and log levels understood
by the reporting service, and the immutable per-feature and per-scenario state
the lifecycle state machine carries between events.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..events.models import Step


class ItemStatus(str, Enum):
    """Final status of a reporting node."""
    PASSED = "PASSED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class ItemType(str, Enum):
    """Reporting node types."""
    STORY = "STORY"                  # Synthetic root
    SUITE = "SUITE"                  # Feature
    TEST = "TEST"                    # Scenario
    STEP = "STEP"
    BEFORE_TEST = "BEFORE_TEST"
    AFTER_TEST = "AFTER_TEST"


class LogLevel(str, Enum):
    """Severity of a remote log entry."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"              # Binary attachments


class ReporterPhase(str, Enum):
    """Deepest open level of the hierarchy."""
    IDLE = "idle"
    LAUNCH_OPEN = "launch_open"
    FEATURE_OPEN = "feature_open"
    SCENARIO_OPEN = "scenario_open"
    STEP_ACTIVE = "step_active"
    HOOK_ACTIVE = "hook_active"


class HookWindow(str, Enum):
    """Progress of a scenario's before- or after-hook window."""
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class StepCursor:
    """Declared steps of a scenario and the position of the next one to run."""

    steps: tuple[Step, ...] = ()
    position: int = 0

    def declare(self, step: Step) -> 'StepCursor':
        """Return a cursor with the step appended to the declared list."""
        return StepCursor(steps=self.steps + (step,), position=self.position)

    def advance(self) -> tuple[Optional[Step], 'StepCursor']:
        """Return the next declared step and the cursor past it."""
        if self.exhausted:
            return None, self
        return self.steps[self.position], StepCursor(steps=self.steps, position=self.position + 1)

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.steps)

    @property
    def remaining(self) -> tuple[Step, ...]:
        return self.steps[self.position:]


@dataclass(frozen=True)
class OutlineIterations:
    """Suffix labels for the concrete scenarios of an outline."""

    labels: tuple[str, ...] = ()

    @classmethod
    def for_rows(cls, row_count: int) -> 'OutlineIterations':
        """Labels " [1]" .. " [N-1]"; the first example row is the header."""
        return cls(labels=tuple(f" [{i}]" for i in range(1, row_count)))

    def extend(self, other: 'OutlineIterations') -> 'OutlineIterations':
        return OutlineIterations(labels=self.labels + other.labels)

    def pop(self) -> tuple[Optional[str], 'OutlineIterations']:
        """Return the next label (None for a plain scenario) and the rest."""
        if not self.labels:
            return None, self
        return self.labels[0], OutlineIterations(labels=self.labels[1:])


@dataclass(frozen=True)
class FeatureState:
    """Context of the currently open feature."""

    item_id: Optional[str]
    uri: str = ""


@dataclass(frozen=True)
class ScenarioState:
    """Runtime state of the currently open scenario."""

    item_id: Optional[str]
    name: str
    status: ItemStatus = ItemStatus.PASSED
    issue_comments: tuple[str, ...] = ()
    cursor: StepCursor = field(default_factory=StepCursor)

    # Background handling
    in_background: bool = False
    step_prefix: str = ""

    # Hook windows
    before_hooks: HookWindow = HookWindow.PENDING
    after_hooks: HookWindow = HookWindow.PENDING

    def with_status(self, status: ItemStatus) -> 'ScenarioState':
        return replace(self, status=status)

    def with_issue_comment(self, comment: str) -> 'ScenarioState':
        return replace(self, issue_comments=self.issue_comments + (comment,))

    def with_cursor(self, cursor: StepCursor) -> 'ScenarioState':
        return replace(self, cursor=cursor)

    def with_background(self, in_background: bool, step_prefix: str) -> 'ScenarioState':
        return replace(self, in_background=in_background, step_prefix=step_prefix)

    def with_hook_window(self, is_before: bool, window: HookWindow) -> 'ScenarioState':
        if is_before:
            return replace(self, before_hooks=window)
        return replace(self, after_hooks=window)

    def hook_window(self, is_before: bool) -> HookWindow:
        return self.before_hooks if is_before else self.after_hooks

    @property
    def issue_text(self) -> str:
        """Accumulated issue commentary, one comment per line."""
        return "\n".join(self.issue_comments)

    @property
    def after_hooks_due(self) -> bool:
        """Whether the after-hook window may open now.

        All declared steps must have run, the scenario must be outside its
        background block, and the window must not have opened already.
        """
        return (
            self.cursor.exhausted
            and not self.in_background
            and self.after_hooks is HookWindow.PENDING
        )
