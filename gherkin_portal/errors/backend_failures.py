"""
Backend failure classifications.

These exceptions represent failures of the remote reporting service: network
errors, authentication or validation rejections, and unusable backend setup.
"""

from typing import Optional, Dict, Any


class BackendError(Exception):
    """Base class for reporting backend failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class BackendCallError(BackendError):
    """A single backend operation failed."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, status_code: Optional[int] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
        self.status_code = status_code


class BackendConfigurationError(BackendError):
    """The backend cannot be built from the supplied configuration."""

    def __init__(self, message: str, missing_fields: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []
