"""Configuration loading and management for deadwood.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined on the option dataclasses)
    2. Project config (./deadwood.toml)
    3. Explicit config file
    4. Environment variables (DEADWOOD_* prefix, deletion options only)
    5. Keyword overrides (typically from CLI flags)

A TOML file groups options by section:

    [cycles]
    exclude_recursive = true
    min_complexity = 4

    [metrics]
    hub_threshold = 8

    [deletion]
    confidence_threshold = 0.95
    exclude_patterns = ["migrations/*"]

Example:
    >>> config = load_config(deletion={"max_functions_per_batch": 3})
    >>> config.deletion.max_functions_per_batch
    3
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, ConflictingOptionsError, ValidationError

PROJECT_CONFIG_NAME = "deadwood.toml"
ENV_PREFIX = "DEADWOOD_"


def _require_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValidationError(name, value, "must be between 0.0 and 1.0")


def _require_at_least(name: str, value: int, minimum: int) -> None:
    if value < minimum:
        raise ValidationError(name, value, f"must be at least {minimum}")


@dataclass(frozen=True)
class CycleOptions:
    """Cycle enumeration caps and classification filters.

    Attributes:
        Enumeration:
            min_size: Drop raw cycles shorter than this before classification
            max_length: Longest cycle the search will follow
            max_cycles: Keep at most this many distinct cycles
            max_search_steps: DFS expansion budget across the whole search

        Filters (applied in this order, each counted separately):
            exclude_recursive: Drop self-recursive (length 1) cycles
            recursive_only: Keep only self-recursive cycles; skips min_complexity
            exclude_clear: Drop cycles containing a teardown-named function
            clear_names: Function names treated as teardown
            min_complexity: Minimum cycle size to keep
            cross_layer_only: Keep only cycles that cross a layer boundary
            cross_module_only: Keep only cycles that cross a module boundary

        Boundaries:
            source_root: Directory name under which module names are taken
    """

    min_size: int = 1
    max_length: int = 12
    max_cycles: int = 1000
    max_search_steps: int = 200_000

    exclude_recursive: bool = False
    recursive_only: bool = False
    exclude_clear: bool = False
    clear_names: tuple[str, ...] = ("clear",)
    min_complexity: int = 1
    cross_layer_only: bool = False
    cross_module_only: bool = False

    source_root: str = "src"

    def __post_init__(self) -> None:
        _require_at_least("min_size", self.min_size, 1)
        _require_at_least("max_length", self.max_length, 1)
        _require_at_least("max_cycles", self.max_cycles, 1)
        _require_at_least("max_search_steps", self.max_search_steps, 1)
        _require_at_least("min_complexity", self.min_complexity, 1)
        if self.min_size > self.max_length:
            raise ValidationError("min_size", self.min_size, "must not exceed max_length")
        if self.exclude_recursive and self.recursive_only:
            raise ConflictingOptionsError("exclude_recursive", "recursive_only")
        if not self.source_root:
            raise ValidationError("source_root", self.source_root, "must not be empty")


@dataclass(frozen=True)
class MetricsOptions:
    """Hub and utility classification thresholds."""

    hub_threshold: int = 5
    utility_threshold: int = 5
    max_hub_functions: int = 10
    max_utility_functions: int = 10

    def __post_init__(self) -> None:
        _require_at_least("hub_threshold", self.hub_threshold, 1)
        _require_at_least("utility_threshold", self.utility_threshold, 1)
        _require_at_least("max_hub_functions", self.max_hub_functions, 0)
        _require_at_least("max_utility_functions", self.max_utility_functions, 0)


@dataclass(frozen=True)
class DeletionOptions:
    """Safe deletion run options.

    Attributes:
        Candidate selection:
            confidence_threshold: Call edges scoring below this do not keep
                their callee alive
            candidate_min_confidence: Minimum candidate confidence to keep
            protection_threshold: Type-safety confidence at which a function
                is protected from deletion
            include_exports: Consider exported functions for deletion
            include_static_methods: Consider static methods for deletion
            exclude_tests: Never delete functions in test files
            exclude_patterns: Glob patterns of paths never touched

        Execution:
            execute: Actually modify files (preview otherwise)
            dry_run: Force preview even when execute is set
            max_functions_per_batch: Batch size; each batch is validated and
                rolled back independently
            backup_dir: Directory under which backups are created

        Validation:
            type_check_command: Shell command run as the type check
            test_command: Shell command run as the test suite
            validation_timeout_seconds: Per-command timeout
    """

    confidence_threshold: float = 0.90
    candidate_min_confidence: float = 0.0
    protection_threshold: float = 0.70
    include_exports: bool = False
    include_static_methods: bool = False
    exclude_tests: bool = False
    exclude_patterns: tuple[str, ...] = (
        "*/node_modules/*",
        "*/dist/*",
        "*/build/*",
        "*/.venv/*",
    )

    execute: bool = False
    dry_run: bool = False
    max_functions_per_batch: int = 5
    backup_dir: str = ".deadwood/backups"

    type_check_command: str = ""
    test_command: str = ""
    validation_timeout_seconds: int = 600

    def __post_init__(self) -> None:
        _require_fraction("confidence_threshold", self.confidence_threshold)
        _require_fraction("candidate_min_confidence", self.candidate_min_confidence)
        _require_fraction("protection_threshold", self.protection_threshold)
        _require_at_least("max_functions_per_batch", self.max_functions_per_batch, 1)
        _require_at_least("validation_timeout_seconds", self.validation_timeout_seconds, 1)
        if not self.backup_dir:
            raise ValidationError("backup_dir", self.backup_dir, "must not be empty")

    @property
    def is_preview(self) -> bool:
        """True unless an explicit execute directive is given."""
        return self.dry_run or not self.execute


@dataclass(frozen=True)
class DeadwoodConfig:
    """All option groups for one run."""

    cycles: CycleOptions = field(default_factory=CycleOptions)
    metrics: MetricsOptions = field(default_factory=MetricsOptions)
    deletion: DeletionOptions = field(default_factory=DeletionOptions)


_SECTIONS = {
    "cycles": CycleOptions,
    "metrics": MetricsOptions,
    "deletion": DeletionOptions,
}


def load_config(config_file: Optional[Path] = None, **overrides: dict) -> DeadwoodConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Per-section dicts, e.g. ``cycles={"max_length": 8}``

    Returns:
        Validated DeadwoodConfig instance

    Raises:
        ConfigurationError: If a config file is missing, unreadable or has
            unknown keys
        ValidationError: If a merged value is out of range
    """
    merged: dict[str, dict[str, Any]] = {name: {} for name in _SECTIONS}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        _merge_sections(merged, _load_toml_file(project_config), project_config)

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge_sections(merged, _load_toml_file(config_file), config_file)

    merged["deletion"].update(_load_env_vars(DeletionOptions))

    for section, values in overrides.items():
        if section not in _SECTIONS:
            raise ConfigurationError(f"Unknown configuration section: {section}")
        merged[section].update({k: v for k, v in values.items() if v is not None})

    built = {}
    for section, cls in _SECTIONS.items():
        values = _coerce_sequences(cls, merged[section])
        try:
            built[section] = cls(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [{section}] configuration: {e}")
    return DeadwoodConfig(**built)


def _merge_sections(merged: dict[str, dict[str, Any]], data: dict, source: Path) -> None:
    for section, values in data.items():
        if section not in _SECTIONS:
            raise ConfigurationError(f"Unknown section [{section}] in {source}")
        if not isinstance(values, dict):
            raise ConfigurationError(f"Section [{section}] in {source} must be a table")
        merged[section].update(values)


def _coerce_sequences(cls: type, values: dict[str, Any]) -> dict[str, Any]:
    # TOML and CLI give lists; the frozen dataclasses hold tuples
    tuple_fields = {f.name for f in fields(cls) if str(f.type).startswith("tuple")}
    return {
        k: tuple(v) if k in tuple_fields and isinstance(v, list) else v for k, v in values.items()
    }


def _load_env_vars(cls: type) -> dict[str, Any]:
    """Load scalar options from DEADWOOD_* environment variables.

    Supported environment variables (deletion options):
        DEADWOOD_CONFIDENCE_THRESHOLD: float
        DEADWOOD_CANDIDATE_MIN_CONFIDENCE: float
        DEADWOOD_MAX_FUNCTIONS_PER_BATCH: int
        DEADWOOD_INCLUDE_EXPORTS: bool (true/false/1/0)
        DEADWOOD_BACKUP_DIR: str
        DEADWOOD_TYPE_CHECK_COMMAND: str
        DEADWOOD_TEST_COMMAND: str
        DEADWOOD_VALIDATION_TIMEOUT_SECONDS: int
        ...and every other scalar DeletionOptions field
    """
    type_hints = get_type_hints(cls)
    result: dict[str, Any] = {}

    for f in fields(cls):
        env_key = f"{ENV_PREFIX}{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            parsed = _parse_env_value(env_value, type_hints[f.name])
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[f.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed as a single string.
    """
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
