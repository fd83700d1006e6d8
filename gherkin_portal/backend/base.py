"""Base classes for reporting backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..state.models import ItemStatus, ItemType, LogLevel

NOT_ISSUE = "NOT_ISSUE"
AUTOMATION_BUG = "AUTOMATION_BUG"


@dataclass(frozen=True)
class Issue:
    """Defect classification attached to a finished item."""
    issue_type: str
    comment: Optional[str] = None


@dataclass(frozen=True)
class LaunchRequest:
    """Request to open a launch."""
    name: str
    start_time: datetime
    tags: frozenset[str] = field(default_factory=frozenset)
    mode: str = "DEFAULT"
    description: str = ""


@dataclass(frozen=True)
class FinishLaunchRequest:
    """Request to close a launch."""
    end_time: datetime


@dataclass(frozen=True)
class ItemRequest:
    """Request to open a node under a parent (or the launch root)."""
    launch_id: Optional[str]
    name: str
    start_time: datetime
    item_type: ItemType
    description: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class FinishItemRequest:
    """Request to close a node."""
    end_time: datetime
    status: Optional[ItemStatus] = None
    issue: Optional[Issue] = None


@dataclass(frozen=True)
class Attachment:
    """Binary content attached to a log entry."""
    name: str
    content: bytes
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True)
class LogRequest:
    """Request to append a log entry to a node."""
    item_id: str
    message: str
    level: LogLevel
    log_time: datetime
    attachment: Optional[Attachment] = None


class ReportingBackend(ABC):
    """Remote reporting service exposing the launch/item/log operations.

    Implementations raise on failure; callers decide what a failure means.
    """

    @abstractmethod
    def start_launch(self, request: LaunchRequest) -> str:
        """Open a launch and return its identifier."""

    @abstractmethod
    def finish_launch(self, launch_id: str, request: FinishLaunchRequest) -> None:
        """Close a launch."""

    @abstractmethod
    def start_item(self, request: ItemRequest, parent_id: Optional[str] = None) -> str:
        """Open a node under parent_id (None attaches to the launch root)."""

    @abstractmethod
    def finish_item(self, item_id: str, request: FinishItemRequest) -> None:
        """Close a node."""

    @abstractmethod
    def log(self, request: LogRequest) -> None:
        """Append a log entry to a node."""

    def close(self) -> None:
        """Release transport resources."""
