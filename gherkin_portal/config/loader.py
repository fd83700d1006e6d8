"""Configuration loader with layered parameter precedence."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..errors import BackendConfigurationError
from .defaults import (
    BackendParams,
    DefaultConfig,
    LaunchParams,
    LoggingParams,
    ReporterParams,
    get_default_config,
)

CONFIG_FILE_NAME = "reportportal.yaml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "RP_ENDPOINT": ("backend", "endpoint"),
    "RP_PROJECT": ("backend", "project"),
    "RP_UUID": ("backend", "uuid"),
    "RP_BACKEND": ("backend", "kind"),
    "RP_LAUNCH": ("launch", "name"),
    "RP_DESCRIPTION": ("launch", "description"),
    "RP_TAGS": ("launch", "tags"),
    "RP_MODE": ("launch", "mode"),
    "RP_FLAVOR": ("reporter", "flavor"),
    "RP_LOG_LEVEL": ("logging", "level"),
}

TAG_SEPARATOR = ";"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with layered precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path.cwd()

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from reportportal.yaml in the config directory."""
        config_file = self.config_dir / CONFIG_FILE_NAME

        if not config_file.exists():
            return {}

        try:
            with open(config_file) as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise BackendConfigurationError(
                f"Cannot parse {config_file}: {e}", context={"path": str(config_file)}
            )

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise BackendConfigurationError(
                f"{config_file} must contain a mapping of sections",
                context={"path": str(config_file), "found": type(file_config).__name__},
            )

        return file_config

    def load_env_config(self, environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """Collect RP_* environment overrides into a nested dictionary."""
        if environ is None:
            environ = os.environ

        config: dict[str, Any] = {}
        for var, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value is None or value == "":
                continue
            config.setdefault(section, {})[key] = value

        return config

    def merge_config(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with layered precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. RP_* environment variables
        3. reportportal.yaml in the config directory
        4. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config(environ))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> DefaultConfig:
        """
        Merge all layers and build the typed configuration.

        Raises:
            BackendConfigurationError: If the file is unreadable or a value
                has the wrong shape
        """
        merged = self.merge_config(overrides, environ)
        try:
            return build_config(merged)
        except (AttributeError, TypeError, ValueError) as e:
            raise BackendConfigurationError(f"Invalid configuration value: {e}")

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def parse_tags(value: Any) -> frozenset[str]:
    """Accept tags as a ';'-separated string or any iterable of names."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = value.split(TAG_SEPARATOR)
    else:
        items = [str(item) for item in value]
    return frozenset(item.strip() for item in items if item.strip())


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def build_config(config: dict[str, Any]) -> DefaultConfig:
    """Build typed configuration from a merged dictionary."""
    launch = config.get("launch", {})
    backend = config.get("backend", {})
    reporter = config.get("reporter", {})
    logging_cfg = config.get("logging", {})

    return DefaultConfig(
        launch=LaunchParams(
            name=str(launch.get("name", LaunchParams.name)),
            description=str(launch.get("description", "")),
            tags=parse_tags(launch.get("tags")),
            mode=str(launch.get("mode", LaunchParams.mode)).upper(),
        ),
        backend=BackendParams(
            kind=str(backend.get("kind", BackendParams.kind)).lower(),
            endpoint=str(backend.get("endpoint", "")).rstrip("/"),
            project=str(backend.get("project", "")),
            uuid=str(backend.get("uuid", "")),
            timeout_seconds=int(backend.get("timeout_seconds", BackendParams.timeout_seconds)),
            verify_ssl=_to_bool(backend.get("verify_ssl", True)),
        ),
        reporter=ReporterParams(
            flavor=str(reporter.get("flavor", ReporterParams.flavor)).lower(),
            root_item_name=str(reporter.get("root_item_name", ReporterParams.root_item_name)),
        ),
        logging=LoggingParams(
            level=str(logging_cfg.get("level", LoggingParams.level)).upper(),
            format_json=_to_bool(logging_cfg.get("format_json", False)),
        ),
    )
