"""
Centralized logging configuration for the Gherkin Portal reporter.

This module provides standardized logging configuration using structlog
for all components. Local diagnostics of the reporter (state transitions,
backend failures, consistency warnings) go through this configuration; the
remote log entries sent to the reporting service never do.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

PACKAGE_LOGGER = "gherkin_portal"


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # Reporter diagnostics go to stderr so they never mix with the host's
    # own stdout output
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"
    )
    # basicConfig is a no-op once the host has handlers; the package level
    # still applies
    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for lifecycle state machine decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the state machine subsystem
    """
    return get_logger(name).bind(subsystem="state_machine")


def get_backend_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for calls against the reporting backend.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the backend subsystem
    """
    return get_logger(name).bind(subsystem="backend")


def log_state_transition(
    logger: FilteringBoundLogger,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a lifecycle phase change with standardized format.

    Args:
        logger: Structlog logger instance
        from_state: Phase before the event
        to_state: Phase after the event
        trigger: Name of the lifecycle event that caused the change
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("State transition")


def log_backend_failure(
    logger: FilteringBoundLogger,
    operation: str,
    target: Optional[str],
    error: BaseException,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a failed backend call with enough context to find the node.

    Args:
        logger: Structlog logger instance
        operation: Backend operation name (start_launch, finish_item, ...)
        target: Launch or item identifier, or display name when no id exists yet
        error: The exception raised by the backend
        context: Additional context data
    """
    bound_logger = logger.bind(
        operation=operation,
        target=target,
        error=str(error),
        error_type=type(error).__name__,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.error("Backend call failed")
