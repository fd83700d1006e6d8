"""
Best-effort call layer over a reporting backend.

Every backend failure is caught here, logged with the operation and target,
and turned into "the call did not happen": a start returns None, a finish or
log returns nothing. Calls against an unset identifier are skipped with a
local error entry instead of reaching the backend.
"""

from typing import Iterable, Optional

from ..config.defaults import LaunchParams
from ..logging.config import get_backend_logger, log_backend_failure
from ..rules.status import issue_for
from ..state.models import ItemStatus, ItemType, LogLevel
from ..utils.time import Clock, utc_now
from .base import (
    Attachment,
    FinishItemRequest,
    FinishLaunchRequest,
    ItemRequest,
    LaunchRequest,
    LogRequest,
    ReportingBackend,
)

logger = get_backend_logger(__name__)


class ReportingService:
    """Issues launch, item and log operations without ever raising."""

    def __init__(self, backend: ReportingBackend, clock: Clock = utc_now):
        self.backend = backend
        self.clock = clock
        self.logger = logger
        self._failure_count = 0

    @property
    def failure_count(self) -> int:
        """Number of backend calls that raised."""
        return self._failure_count

    def start_launch(self, params: LaunchParams) -> Optional[str]:
        """Open a launch; None when the backend call fails."""
        request = LaunchRequest(
            name=params.name,
            start_time=self.clock(),
            tags=params.tags,
            mode=params.mode,
            description=params.description,
        )
        try:
            launch_id = self.backend.start_launch(request)
        except Exception as e:
            self._record_failure("start_launch", params.name, e)
            return None

        self.logger.info("Launch started", launch_id=launch_id, launch_name=params.name)
        return launch_id

    def finish_launch(self, launch_id: Optional[str]) -> None:
        """Close a launch."""
        if launch_id is None:
            self._skip("finish_launch", "Trying to finish unspecified launch")
            return

        try:
            self.backend.finish_launch(launch_id, FinishLaunchRequest(end_time=self.clock()))
        except Exception as e:
            self._record_failure("finish_launch", launch_id, e)
            return

        self.logger.info("Launch finished", launch_id=launch_id)

    def start_item(
        self,
        launch_id: Optional[str],
        parent_id: Optional[str],
        name: str,
        item_type: ItemType,
        description: str = "",
        tags: Iterable[str] = ()
    ) -> Optional[str]:
        """Open a node under parent_id (None attaches to the launch root)."""
        request = ItemRequest(
            launch_id=launch_id,
            name=name,
            start_time=self.clock(),
            item_type=item_type,
            description=description,
            tags=frozenset(tags),
        )
        try:
            item_id = self.backend.start_item(request, parent_id)
        except Exception as e:
            self._record_failure("start_item", name, e, context={
                "parent_id": parent_id,
                "item_type": item_type.value,
            })
            return None

        self.logger.debug(
            "Item started",
            item_id=item_id,
            parent_id=parent_id,
            item_type=item_type.value,
            item_name=name,
        )
        return item_id

    def finish_item(
        self,
        item_id: Optional[str],
        status: Optional[ItemStatus] = None,
        issue_comments: str = ""
    ) -> None:
        """Close a node, attaching an issue according to its status."""
        if item_id is None:
            self._skip("finish_item", "Trying to finish unspecified test item")
            return

        request = FinishItemRequest(
            end_time=self.clock(),
            status=status,
            issue=issue_for(status, issue_comments),
        )
        try:
            self.backend.finish_item(item_id, request)
        except Exception as e:
            self._record_failure("finish_item", item_id, e)
            return

        self.logger.debug(
            "Item finished",
            item_id=item_id,
            status=status.value if status else None,
        )

    def send_log(
        self,
        item_id: Optional[str],
        message: str,
        level: LogLevel,
        attachment: Optional[Attachment] = None
    ) -> None:
        """Append a log entry to a node."""
        if item_id is None:
            self._skip("log", "Trying to send log while no test item is in progress")
            return

        request = LogRequest(
            item_id=item_id,
            message=message,
            level=level,
            log_time=self.clock(),
            attachment=attachment,
        )
        try:
            self.backend.log(request)
        except Exception as e:
            self._record_failure("log", item_id, e)

    def close(self) -> None:
        """Release the backend's transport."""
        try:
            self.backend.close()
        except Exception as e:
            self._record_failure("close", None, e)

    def _record_failure(self, operation: str, target: Optional[str],
                        error: Exception, context: Optional[dict] = None) -> None:
        self._failure_count += 1
        log_backend_failure(self.logger, operation, target, error, context)

    def _skip(self, operation: str, message: str) -> None:
        self.logger.error(message, operation=operation, consistency="unset_identifier")
