"""
Recovery strategy classifications for error handling.
"""

from typing import Optional


class LookupFallback(Exception):
    """A lookup missed and a default value was substituted."""

    def __init__(self, message: str, lookup: Optional[str] = None,
                 fallback_value: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.lookup = lookup
        self.fallback_value = fallback_value
        self.allows_degradation = True
