"""In-process reporting backend that records every call."""

import itertools
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import BackendCallError
from ..logging.config import get_backend_logger
from .base import (
    FinishItemRequest,
    FinishLaunchRequest,
    ItemRequest,
    LaunchRequest,
    LogRequest,
    ReportingBackend,
)

logger = get_backend_logger(__name__)


@dataclass
class RecordedItem:
    """A node as seen by the in-memory backend."""
    item_id: str
    parent_id: Optional[str]
    request: ItemRequest
    finish: Optional[FinishItemRequest] = None
    logs: list[LogRequest] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return self.finish is not None


@dataclass(frozen=True)
class BackendCall:
    """One recorded backend call, in call order."""
    operation: str
    target: Optional[str]
    payload: Any


class InMemoryReportingBackend(ReportingBackend):
    """
    Backend keeping launches, items and logs in memory.

    Used for dry runs and as the test double of the remote service. Failures
    can be injected per operation with fail_on.
    """

    def __init__(self, fail_on: Optional[set[str]] = None):
        self.fail_on = set(fail_on or ())
        self.calls: list[BackendCall] = []
        self.launches: dict[str, dict[str, Any]] = {}
        self.items: dict[str, RecordedItem] = {}
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _maybe_fail(self, operation: str, target: Optional[str]) -> None:
        if operation in self.fail_on:
            raise BackendCallError(
                f"Injected failure for {operation}",
                operation=operation,
                target=target,
            )

    def start_launch(self, request: LaunchRequest) -> str:
        self._maybe_fail("start_launch", request.name)
        launch_id = self._next_id("launch")
        self.launches[launch_id] = {"request": request, "finish": None}
        self.calls.append(BackendCall("start_launch", launch_id, request))
        return launch_id

    def finish_launch(self, launch_id: str, request: FinishLaunchRequest) -> None:
        self._maybe_fail("finish_launch", launch_id)
        if launch_id not in self.launches:
            raise BackendCallError("Unknown launch", operation="finish_launch",
                                   target=launch_id, status_code=404)
        self.launches[launch_id]["finish"] = request
        self.calls.append(BackendCall("finish_launch", launch_id, request))

    def start_item(self, request: ItemRequest, parent_id: Optional[str] = None) -> str:
        self._maybe_fail("start_item", request.name)
        if parent_id is not None and parent_id not in self.items:
            raise BackendCallError("Unknown parent item", operation="start_item",
                                   target=parent_id, status_code=404)
        item_id = self._next_id("item")
        self.items[item_id] = RecordedItem(item_id=item_id, parent_id=parent_id, request=request)
        self.calls.append(BackendCall("start_item", item_id, request))
        return item_id

    def finish_item(self, item_id: str, request: FinishItemRequest) -> None:
        self._maybe_fail("finish_item", item_id)
        item = self.items.get(item_id)
        if item is None:
            raise BackendCallError("Unknown item", operation="finish_item",
                                   target=item_id, status_code=404)
        if item.closed:
            raise BackendCallError("Item already finished", operation="finish_item",
                                   target=item_id, status_code=406)
        item.finish = request
        self.calls.append(BackendCall("finish_item", item_id, request))

    def log(self, request: LogRequest) -> None:
        self._maybe_fail("log", request.item_id)
        item = self.items.get(request.item_id)
        if item is None:
            raise BackendCallError("Unknown item", operation="log",
                                   target=request.item_id, status_code=404)
        if item.closed:
            raise BackendCallError("Item already finished", operation="log",
                                   target=request.item_id, status_code=406)
        item.logs.append(request)
        self.calls.append(BackendCall("log", request.item_id, request))

    # Inspection helpers

    def items_named(self, name: str) -> list[RecordedItem]:
        return [item for item in self.items.values() if item.request.name == name]

    def children_of(self, parent_id: Optional[str]) -> list[RecordedItem]:
        return [item for item in self.items.values() if item.parent_id == parent_id]

    def summary(self) -> dict[str, Any]:
        """Counts of what was reported, for dry-run output."""
        return {
            "launches": len(self.launches),
            "items": len(self.items),
            "open_items": sum(1 for item in self.items.values() if not item.closed),
            "logs": sum(len(item.logs) for item in self.items.values()),
        }
