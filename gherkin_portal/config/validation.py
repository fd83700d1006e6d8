"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from .defaults import DefaultConfig

LAUNCH_MODES = ("DEFAULT", "DEBUG")
FLAVORS = ("scenario", "step")
BACKEND_KINDS = ("http", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_launch_params(config: DefaultConfig) -> list[ValidationError]:
        """Validate launch parameters."""
        errors = []

        if not config.launch.name.strip():
            errors.append(ValidationError(
                field="launch.name",
                message="Must be a non-empty string",
                value=config.launch.name
            ))

        if config.launch.mode not in LAUNCH_MODES:
            errors.append(ValidationError(
                field="launch.mode",
                message=f"Must be one of {', '.join(LAUNCH_MODES)}",
                value=config.launch.mode
            ))

        return errors

    @staticmethod
    def validate_backend_params(config: DefaultConfig) -> list[ValidationError]:
        """Validate backend parameters."""
        errors = []
        backend = config.backend

        if backend.kind not in BACKEND_KINDS:
            errors.append(ValidationError(
                field="backend.kind",
                message=f"Must be one of {', '.join(BACKEND_KINDS)}",
                value=backend.kind
            ))

        if backend.kind == "http":
            for name in ("endpoint", "project", "uuid"):
                if not getattr(backend, name):
                    errors.append(ValidationError(
                        field=f"backend.{name}",
                        message="Required for the http backend",
                        value=getattr(backend, name)
                    ))

            if backend.endpoint and not backend.endpoint.startswith(("http://", "https://")):
                errors.append(ValidationError(
                    field="backend.endpoint",
                    message="Must be an http(s) URL",
                    value=backend.endpoint
                ))

        if backend.timeout_seconds <= 0:
            errors.append(ValidationError(
                field="backend.timeout_seconds",
                message="Must be a positive integer",
                value=backend.timeout_seconds
            ))

        return errors

    @staticmethod
    def validate_reporter_params(config: DefaultConfig) -> list[ValidationError]:
        """Validate reporter and logging parameters."""
        errors = []

        if config.reporter.flavor not in FLAVORS:
            errors.append(ValidationError(
                field="reporter.flavor",
                message=f"Must be one of {', '.join(FLAVORS)}",
                value=config.reporter.flavor
            ))

        if config.logging.level not in LOG_LEVELS:
            errors.append(ValidationError(
                field="logging.level",
                message=f"Must be one of {', '.join(LOG_LEVELS)}",
                value=config.logging.level
            ))

        return errors

    @staticmethod
    def validate_config(config: DefaultConfig) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []
        errors.extend(ConfigValidator.validate_launch_params(config))
        errors.extend(ConfigValidator.validate_backend_params(config))
        errors.extend(ConfigValidator.validate_reporter_params(config))
        return errors
