"""Configuration and input exceptions: options, config files, snapshots."""

from pathlib import Path
from typing import Any, Union

from .base import DeadwoodError
from .taxonomy import ErrorCode


class ConfigurationError(DeadwoodError):
    """Base class for configuration-related errors."""

    code = ErrorCode.DW800


class ValidationError(ConfigurationError):
    """Raised when an option value is out of range or options conflict.

    Always raised before any file is touched.
    """

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid option {key}={value!r}: {reason}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConflictingOptionsError(ValidationError):
    """Raised when two options cannot be enabled together."""

    code = ErrorCode.DW801

    def __init__(self, first: str, second: str):
        super().__init__(first, True, f"cannot be combined with {second}")
        self.second = second


class SnapshotLoadError(ConfigurationError):
    """Raised when a snapshot file cannot be read or has the wrong shape."""

    code = ErrorCode.DW900

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot load snapshot: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = str(path)
        self.reason = reason
