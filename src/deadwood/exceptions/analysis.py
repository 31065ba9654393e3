"""Analysis-time exceptions: graph integrity, storage, filesystem, subprocesses."""

from pathlib import Path
from typing import Optional, Union

from .base import DeadwoodError
from .taxonomy import ErrorCode


class AnalysisError(DeadwoodError):
    """Base class for errors raised while analyzing or mutating a codebase."""

    pass


class DataIntegrityError(AnalysisError):
    """Raised when a call edge references a function that does not exist."""

    code = ErrorCode.DW100

    def __init__(self, edge_ref: str, missing_id: str, role: str):
        super().__init__(
            f"Call edge {edge_ref} references unknown {role} '{missing_id}'",
            details={"edge": edge_ref, "missing_id": missing_id, "role": role},
        )
        self.edge_ref = edge_ref
        self.missing_id = missing_id
        self.role = role


class StorageQueryError(AnalysisError):
    """Raised when the type relationship store cannot answer a query."""

    code = ErrorCode.DW200

    def __init__(self, query: str, key: str, reason: str):
        super().__init__(
            f"Type store query {query}({key}) failed",
            details={"query": query, "key": key, "reason": reason},
        )
        self.query = query
        self.key = key
        self.reason = reason


class FileSystemError(AnalysisError):
    """Raised when a source file cannot be read, written or renamed."""

    code = ErrorCode.DW300

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Filesystem operation failed on {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = str(filepath)
        self.reason = reason


class StaleFileError(FileSystemError):
    """Raised when a file changed on disk after it was backed up."""

    code = ErrorCode.DW302

    def __init__(self, filepath: Union[str, Path]):
        super().__init__(filepath, "file changed since backup was taken")


class BackupError(AnalysisError):
    """Raised when a backup is missing, incomplete or corrupt."""

    code = ErrorCode.DW301

    def __init__(self, backup_path: Union[str, Path], reason: str):
        super().__init__(
            f"Backup at {backup_path} is unusable",
            details={"backup": str(backup_path), "reason": reason},
            recovery_hint="Check the manifest.json and files/ directory of the backup",
        )
        self.backup_path = str(backup_path)
        self.reason = reason


class ProcessError(AnalysisError):
    """Raised when a validation command cannot be run to completion."""

    code = ErrorCode.DW400

    def __init__(self, command: str, reason: str, timeout: Optional[float] = None):
        details = {"command": command, "reason": reason}
        if timeout is not None:
            details["timeout"] = str(timeout)
        super().__init__(f"Validation command could not run: {command}", details=details)
        self.command = command
        self.reason = reason
        self.timeout = timeout
