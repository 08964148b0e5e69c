"""Configuration loading and management for appcat-regress.

Configuration sources are merged in priority order:
    1. Defaults (defined in HarnessConfig)
    2. Global config (~/.appcat-regress.toml)
    3. Project config (./appcat-regress.toml)
    4. Explicit config file
    5. Environment variables (APPCAT_REGRESS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(test_data_dir="data", actions=["analyze", "validate"])
    >>> config.actions
    ('analyze', 'validate')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ACTION_RUN = "run"
ACTION_ANALYZE = "analyze"
ACTION_VALIDATE = "validate"

# Actions always execute in this order, whatever order they were given in
ACTION_ORDER = (ACTION_RUN, ACTION_ANALYZE, ACTION_VALIDATE)

DEFAULT_ANALYZER_TARGETS = (
    "cloud-readiness",
    "linux",
    "azure-appservice",
    "azure-aks",
    "azure-container-apps",
    "openjdk11",
    "openjdk17",
    "openjdk21",
)

ENV_PREFIX = "APPCAT_REGRESS_"


@dataclass(frozen=True)
class HarnessConfig:
    """Configuration for one harness run.

    Attributes:
        Folders:
            analyzer_dir: Folder holding the analyzer executable
            test_data_dir: Folder whose subdirectories are candidate projects
            output_dir: Folder receiving analyzer output, audit records and reports
            baseline_dir: Folder holding one accepted document per project

        Selection:
            target: Single project to run (None = every project in test_data_dir)
            actions: Steps to perform per project (run, analyze, validate)

        Analyzer invocation:
            analyzer_executable: Executable name inside analyzer_dir
            analyzer_targets: Values joined into the analyzer's --target flag
            analyzer_timeout_seconds: Kill the analyzer after this long (None = no limit)

        Execution:
            workers: Projects processed in parallel (1 = sequential)

        Output:
            output_file_name: Name of the analyzer's findings document
            persist_incidents: Write one audit record per incident during analyze
            file_prefix: Prefix for the run's log, summary and report files
            verbosity: Logging verbosity level
    """

    # Folders
    analyzer_dir: str = "."
    test_data_dir: str = "test_data"
    output_dir: str = "test_output"
    baseline_dir: str = "baseline"

    # Selection
    target: Optional[str] = None
    actions: tuple[str, ...] = (ACTION_ANALYZE,)

    # Analyzer invocation
    analyzer_executable: str = "appcat"
    analyzer_targets: tuple[str, ...] = DEFAULT_ANALYZER_TARGETS
    analyzer_timeout_seconds: Optional[int] = None

    # Execution
    workers: int = 1

    # Output
    output_file_name: str = "output.yaml"
    persist_incidents: bool = True
    file_prefix: str = "appcat_test"
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # Lists from TOML or the CLI are frozen into tuples
        object.__setattr__(self, "actions", tuple(self.actions))
        object.__setattr__(self, "analyzer_targets", tuple(self.analyzer_targets))

        if not self.actions:
            raise ValueError("actions must not be empty")
        unknown = [a for a in self.actions if a not in ACTION_ORDER]
        if unknown:
            raise ValueError(
                f"Unknown action(s): {', '.join(unknown)}. Choose from: {', '.join(ACTION_ORDER)}"
            )

        if not self.analyzer_targets:
            raise ValueError("analyzer_targets must not be empty")
        if not self.analyzer_executable:
            raise ValueError("analyzer_executable must not be empty")

        if self.analyzer_timeout_seconds is not None and self.analyzer_timeout_seconds < 1:
            raise ValueError("analyzer_timeout_seconds must be at least 1")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

        if not self.output_file_name:
            raise ValueError("output_file_name must not be empty")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def ordered_actions(self) -> tuple[str, ...]:
        """Configured actions in execution order, without repeats."""
        return tuple(a for a in ACTION_ORDER if a in self.actions)

    def has_action(self, action: str) -> bool:
        return action in self.actions


def load_config(config_file: Optional[Path] = None, **overrides) -> HarnessConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options never mask file values.

    Returns:
        Validated HarnessConfig instance

    Raises:
        ConfigurationError: If a config source is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".appcat-regress.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "appcat-regress.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return HarnessConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from APPCAT_REGRESS_* environment variables.

    Tuple fields (actions, analyzer_targets) take comma-separated values.

    Returns:
        Dict of field_name -> parsed_value for any APPCAT_REGRESS_* vars found.
    """
    type_hints = get_type_hints(HarnessConfig)

    result: dict[str, Any] = {}

    for field_name in HarnessConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Allow settings under a [harness] table as well as at top level
    harness = data.pop("harness", None)
    if isinstance(harness, dict):
        data.update(harness)
    return data


__all__ = [
    "ACTION_ANALYZE",
    "ACTION_ORDER",
    "ACTION_RUN",
    "ACTION_VALIDATE",
    "DEFAULT_ANALYZER_TARGETS",
    "HarnessConfig",
    "load_config",
]
