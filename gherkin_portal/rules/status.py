"""
Status lattice and raw-outcome mapping rules.

Raw outcomes are the lowercase status strings produced by the test engine
(passed, failed, skipped, pending, undefined, ambiguous, ...).
"""

from typing import Optional

from ..backend.base import AUTOMATION_BUG, NOT_ISSUE, Issue
from ..state.models import ItemStatus, LogLevel

PENDING_STEP_COMMENT = "Pending step"
UNDEFINED_STEP_COMMENT = "Undefined step"


def join_status(current: ItemStatus, new: ItemStatus) -> ItemStatus:
    """
    Combine an aggregate status with a newly observed one.

    PASSED < SKIPPED < FAILED; equal statuses are unchanged, anything joined
    with FAILED is FAILED, and any other mismatch is SKIPPED.
    """
    if current == new:
        return current
    if ItemStatus.FAILED in (current, new):
        return ItemStatus.FAILED
    return ItemStatus.SKIPPED


def map_status(raw_status: str) -> ItemStatus:
    """Map an engine outcome to the status lattice (case-insensitive)."""
    normalized = raw_status.lower()
    if normalized == "passed":
        return ItemStatus.PASSED
    if normalized == "skipped":
        return ItemStatus.SKIPPED
    return ItemStatus.FAILED


def map_level(raw_status: str) -> LogLevel:
    """Map an engine outcome to a log severity (case-insensitive)."""
    normalized = raw_status.lower()
    if normalized == "passed":
        return LogLevel.INFO
    if normalized == "skipped":
        return LogLevel.WARN
    return LogLevel.ERROR


def build_issue_comment(raw_status: str) -> Optional[str]:
    """Issue commentary generated by pending and undefined outcomes."""
    # Exact match: engines emit lower-case outcome names here, unlike the
    # status and level mappings which normalize case
    if raw_status == "pending":
        return PENDING_STEP_COMMENT
    if raw_status == "undefined":
        return UNDEFINED_STEP_COMMENT
    return None


def issue_for(status: Optional[ItemStatus], comments: str) -> Optional[Issue]:
    """Issue to attach when closing a node with the given status."""
    if status == ItemStatus.SKIPPED:
        return Issue(issue_type=NOT_ISSUE)
    if comments:
        return Issue(issue_type=AUTOMATION_BUG, comment=comments)
    return None
