"""
Per-run reporting context.

Built once when a run starts and handed to the state machine: the typed
configuration, the best-effort backend call layer and the reporting flavor.
Nothing here is process-global; two runs get two independent contexts.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .backend.base import ReportingBackend
from .backend.http_backend import HttpReportingBackend
from .backend.memory_backend import InMemoryReportingBackend
from .backend.service import ReportingService
from .config.defaults import BackendParams, DefaultConfig, get_default_config
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .errors import BackendConfigurationError
from .logging.config import get_logger
from .state.flavors import ReportingFlavor, build_flavor
from .utils.time import Clock, utc_now

logger = get_logger(__name__)


def build_backend(params: BackendParams) -> ReportingBackend:
    """Create the backend named in the backend parameters."""
    if params.kind == "memory":
        return InMemoryReportingBackend()
    return HttpReportingBackend(params)


@dataclass(frozen=True)
class ReportingContext:
    """Everything a run needs to report, constructed up front."""

    config: DefaultConfig
    service: ReportingService
    flavor: ReportingFlavor

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        backend: Optional[ReportingBackend] = None,
        clock: Clock = utc_now
    ) -> "ReportingContext":
        """
        Load configuration and build the run's collaborators.

        Args:
            config_dir: Directory holding reportportal.yaml (defaults to cwd)
            overrides: Highest-priority configuration overrides
            environ: Environment mapping (defaults to os.environ)
            backend: Ready-made backend; skips backend construction and the
                connection settings checks
            clock: Timestamp source for backend requests

        Raises:
            BackendConfigurationError: If the configuration is invalid
        """
        config = ConfigLoader.create(config_dir).load(overrides, environ)

        errors = ConfigValidator.validate_config(config)
        if backend is not None:
            errors = [err for err in errors if not err.field.startswith("backend.")]
        if errors:
            for err in errors:
                logger.error("Invalid configuration", field=err.field,
                             message=err.message, value=err.value)
            raise BackendConfigurationError(
                "Invalid reporter configuration",
                missing_fields=[err.field for err in errors],
            )

        if backend is None:
            backend = build_backend(config.backend)

        return cls.from_parts(config, backend, clock)

    @classmethod
    def from_parts(
        cls,
        config: Optional[DefaultConfig],
        backend: ReportingBackend,
        clock: Clock = utc_now
    ) -> "ReportingContext":
        """Assemble a context from an already-built configuration."""
        config = config or get_default_config()
        return cls(
            config=config,
            service=ReportingService(backend, clock=clock),
            flavor=build_flavor(config.reporter),
        )
