"""
Local consistency error classifications.

Raised when an operation targets state that does not exist (an unset launch or
item id) or when a lifecycle event arrives in a phase that cannot accept it.
"""

from typing import Optional, Dict, Any


class ConsistencyError(Exception):
    """Operation attempted against an unset launch or item identifier."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.operation = operation
        self.context = context or {}


class EventOrderError(ConsistencyError):
    """Lifecycle event arrived in a phase that cannot accept it."""

    def __init__(self, message: str, event: Optional[str] = None,
                 current_state: Optional[str] = None, **kwargs):
        super().__init__(message, operation=event, **kwargs)
        self.event = event
        self.current_state = current_state


class EventParseError(ConsistencyError):
    """Recorded event payload cannot be turned into an event model."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 line_number: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.line_number = line_number
