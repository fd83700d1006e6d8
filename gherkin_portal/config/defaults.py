"""Default configuration parameters for the reporter."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LaunchParams:
    """Launch-level parameters sent when the run starts."""
    name: str = "Cucumber Launch"
    description: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    mode: str = "DEFAULT"                            # DEFAULT or DEBUG


@dataclass(frozen=True)
class BackendParams:
    """Reporting backend connection parameters."""
    kind: str = "http"                               # http or memory
    endpoint: str = ""
    project: str = ""
    uuid: str = ""                                   # API token
    timeout_seconds: int = 30
    verify_ssl: bool = True


@dataclass(frozen=True)
class ReporterParams:
    """Event-to-hierarchy mapping parameters."""
    flavor: str = "scenario"                         # scenario or step
    root_item_name: str = "Root User Story"


@dataclass(frozen=True)
class LoggingParams:
    """Local diagnostics logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    launch: LaunchParams
    backend: BackendParams
    reporter: ReporterParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        launch=LaunchParams(),
        backend=BackendParams(),
        reporter=ReporterParams(),
        logging=LoggingParams(),
    )
