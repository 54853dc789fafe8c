"""Configuration loading and management for the debt engine.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.debt-engine.toml)
    3. Workspace config (<workspace>/debt-engine.toml or .debtengine/config.toml)
    4. Explicit config file
    5. Environment variables (DEBT_ENGINE_* prefix)
    6. Overrides passed as keyword arguments (CLI flags)

A ``[weights]`` table replaces individual component weights. The merged
vector is always renormalized to sum to 1.0, so a hand-edited file can
never make the composite leave [0, 100].

Example:
    >>> config = load_config(Path("."), history_days=30)
    >>> config.history_days
    30
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError
from .scoring.weights import default_weights, from_percentages, normalize_weights, set_weight

ENV_PREFIX = "DEBT_ENGINE_"
GLOBAL_CONFIG_NAME = ".debt-engine.toml"
WORKSPACE_CONFIG_NAMES = ("debt-engine.toml", ".debtengine/config.toml")

DEFAULT_EXCLUDE_DIRS = (
    "node_modules",
    "target",
    "__pycache__",
    "vendor",
    "dist",
    "build",
)


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one workspace.

    Attributes:
        History:
            history_days: Size of the git history window
            max_files_per_commit: Commits touching more files than this still
                count toward churn but are skipped for co-change pairs
            git_timeout_seconds: Timeout for a single git subprocess

        Normalization and thresholds:
            churn_normalization_percentile: Churn percentile that maps to 100
            warning_threshold: Composite score above which a file is high debt
            critical_threshold: Composite score the forecaster treats as critical
            bus_factor_threshold: Dominant ownership share (percent) where
                knowledge risk starts rising
            min_co_changes: Minimum co-changes for a listed coupling pair

        Smells:
            god_function_lines: Function length that counts as a god function
            long_param_count: Parameter count above which a list is too long

        Performance:
            workers: Parallel workers (None = auto-detect)
            max_file_size_kb: Files larger than this are not parsed

        File filtering:
            exclude_dirs: Directory names skipped while walking the workspace

        weights: Component weights, always normalized
    """

    history_days: int = 90
    max_files_per_commit: int = 50
    git_timeout_seconds: int = 120

    churn_normalization_percentile: int = 90
    warning_threshold: float = 65.0
    critical_threshold: float = 80.0
    bus_factor_threshold: float = 50.0
    min_co_changes: int = 2

    god_function_lines: int = 60
    long_param_count: int = 5

    workers: Optional[int] = None
    max_file_size_kb: int = 512

    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS

    weights: Mapping[str, float] = field(default_factory=default_weights)

    def __post_init__(self) -> None:
        """Validate ranges and normalize the weight vector."""
        _check_range("history_days", self.history_days, 7, 365)
        _check_range("churn_normalization_percentile", self.churn_normalization_percentile, 50, 99)
        _check_range("warning_threshold", self.warning_threshold, 30, 90)
        _check_range("critical_threshold", self.critical_threshold, 50, 100)
        _check_range("bus_factor_threshold", self.bus_factor_threshold, 50, 95)
        if self.critical_threshold < self.warning_threshold:
            raise InvalidConfigError(
                "critical_threshold",
                self.critical_threshold,
                "must not be below warning_threshold",
            )
        for name in (
            "max_files_per_commit",
            "git_timeout_seconds",
            "min_co_changes",
            "god_function_lines",
            "long_param_count",
            "max_file_size_kb",
        ):
            if getattr(self, name) < 1:
                raise InvalidConfigError(name, getattr(self, name), "must be at least 1")
        if self.max_files_per_commit < 2:
            raise InvalidConfigError(
                "max_files_per_commit", self.max_files_per_commit, "must be at least 2"
            )
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")

        if not isinstance(self.weights, Mapping):
            raise InvalidConfigError("weights", self.weights, "must be a table of numbers")
        object.__setattr__(self, "weights", normalize_weights(self.weights))
        object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_kb * 1024

    @property
    def worker_count(self) -> int:
        if self.workers is not None:
            return self.workers
        return min(os.cpu_count() or 4, 8)

    def with_weights(self, weights: Mapping[str, float]) -> "AnalysisConfig":
        return replace(self, weights=dict(weights))

    def with_weight(self, key: str, value: float) -> "AnalysisConfig":
        return replace(self, weights=set_weight(self.weights, key, value))

    def with_default_weights(self) -> "AnalysisConfig":
        return replace(self, weights=default_weights())


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise InvalidConfigError(name, value, f"must be between {low} and {high}")


def load_config(
    workspace: Optional[Path] = None, config_file: Optional[Path] = None, **overrides: Any
) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        workspace: Workspace root to look for a project config in
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is unreadable or missing
        InvalidConfigError: If a value is unknown or out of range
    """
    merged: dict[str, Any] = {}
    weights: dict[str, float] = default_weights()

    candidates = [Path.home() / GLOBAL_CONFIG_NAME]
    if workspace is not None:
        candidates.extend(Path(workspace) / name for name in WORKSPACE_CONFIG_NAMES)

    for candidate in candidates:
        if candidate.is_file():
            _merge_file(candidate, merged, weights)

    if config_file is not None:
        if not config_file.is_file():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge_file(config_file, merged, weights)

    merged.update(_load_env_vars())
    override_weights = overrides.pop("weights", None)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    if override_weights:
        weights.update(override_weights)

    known = set(AnalysisConfig.__dataclass_fields__) - {"weights"}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    if "exclude_dirs" in merged:
        merged["exclude_dirs"] = tuple(merged["exclude_dirs"])

    return AnalysisConfig(weights=weights, **merged)


def _merge_file(path: Path, merged: dict[str, Any], weights: dict[str, float]) -> None:
    try:
        data = _load_toml_file(path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")

    table = data.pop("weights", None)
    if table is not None:
        if not isinstance(table, dict):
            raise InvalidConfigError("weights", table, "must be a table")
        for key, value in table.items():
            if not isinstance(value, (int, float)):
                raise InvalidConfigError(f"weights.{key}", value, "must be a number")
            weights[key] = float(value)
        # A table written in percent is scaled on its own, before it meets the defaults.
        weights.update(from_percentages(table))
    merged.update(data)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from DEBT_ENGINE_* environment variables.

    Tuple fields such as ``exclude_dirs`` take a comma separated list.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        if field_name == "weights":
            continue
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hints[field_name])
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none = [t for t in args if t is not type(None)]
        if non_none:
            type_hint = non_none[0]

    origin = getattr(type_hint, "__origin__", None)
    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())
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
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        return tomllib.load(f)
