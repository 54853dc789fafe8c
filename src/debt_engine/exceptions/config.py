"""Configuration and input validation exceptions."""

from pathlib import Path
from typing import Any

from .base import DebtEngineError


class ConfigurationError(DebtEngineError):
    """Base class for configuration-related errors."""
    pass


class InvalidPathError(ConfigurationError):
    """Raised when the workspace path is invalid or inaccessible."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Invalid path: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration value for '{key}'",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
