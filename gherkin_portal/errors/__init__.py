"""
Error classification for the reporter.

Backend failures, local consistency problems and lookup fallbacks are all
non-fatal: they are raised close to where they happen and caught before they
can reach the host test run.
"""

from .backend_failures import (
    BackendError,
    BackendCallError,
    BackendConfigurationError,
)
from .consistency import (
    ConsistencyError,
    EventOrderError,
    EventParseError,
)
from .recovery import LookupFallback

__all__ = [
    # Backend failures
    "BackendError",
    "BackendCallError",
    "BackendConfigurationError",
    # Local consistency
    "ConsistencyError",
    "EventOrderError",
    "EventParseError",
    # Recovery
    "LookupFallback",
]
