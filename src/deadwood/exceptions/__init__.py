"""Exception hierarchy for deadwood."""

from .analysis import (
    AnalysisError,
    BackupError,
    DataIntegrityError,
    FileSystemError,
    ProcessError,
    StaleFileError,
    StorageQueryError,
)
from .base import DeadwoodError
from .config import (
    ConfigurationError,
    ConflictingOptionsError,
    SnapshotLoadError,
    ValidationError,
)
from .taxonomy import ErrorCode

__all__ = [
    "DeadwoodError",
    "ErrorCode",
    "AnalysisError",
    "DataIntegrityError",
    "StorageQueryError",
    "FileSystemError",
    "StaleFileError",
    "BackupError",
    "ProcessError",
    "ConfigurationError",
    "ValidationError",
    "ConflictingOptionsError",
    "SnapshotLoadError",
]
