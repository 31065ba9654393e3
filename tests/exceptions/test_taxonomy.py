"""Tests for the deadwood error taxonomy."""

import pytest

from deadwood.exceptions import (
    BackupError,
    ConfigurationError,
    ConflictingOptionsError,
    DataIntegrityError,
    DeadwoodError,
    FileSystemError,
    ProcessError,
    SnapshotLoadError,
    StaleFileError,
    StorageQueryError,
    ValidationError,
)
from deadwood.exceptions.taxonomy import ErrorCode, is_recoverable


class TestErrorCode:
    """Test ErrorCode enum."""

    def test_codes_are_their_own_values(self):
        for code in ErrorCode:
            assert code.value == code.name

    def test_absorbed_errors_are_recoverable(self):
        """Integrity, storage, filesystem and subprocess errors do not abort a run."""
        assert is_recoverable(ErrorCode.DW100)
        assert is_recoverable(ErrorCode.DW200)
        assert is_recoverable(ErrorCode.DW300)
        assert is_recoverable(ErrorCode.DW400)

    def test_option_and_backup_errors_abort(self):
        assert not is_recoverable(ErrorCode.DW800)
        assert not is_recoverable(ErrorCode.DW301)
        assert not is_recoverable(ErrorCode.DW900)


class TestExceptionCodes:
    """Each exception class carries its code."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (DataIntegrityError("a->b", "b", "callee"), ErrorCode.DW100),
            (StorageQueryError("get_type_members", "T1", "down"), ErrorCode.DW200),
            (FileSystemError("x.py", "denied"), ErrorCode.DW300),
            (BackupError("/tmp/b", "missing"), ErrorCode.DW301),
            (StaleFileError("x.py"), ErrorCode.DW302),
            (ProcessError("mypy .", "timed out", timeout=5), ErrorCode.DW400),
            (ValidationError("max_length", 0, "must be at least 1"), ErrorCode.DW800),
            (ConflictingOptionsError("a", "b"), ErrorCode.DW801),
            (SnapshotLoadError("s.json", "bad"), ErrorCode.DW900),
        ],
    )
    def test_code(self, error, code):
        assert error.code is code
        assert isinstance(error, DeadwoodError)

    def test_hierarchy(self):
        assert issubclass(StaleFileError, FileSystemError)
        assert issubclass(ConflictingOptionsError, ValidationError)
        assert issubclass(ValidationError, ConfigurationError)
        assert issubclass(SnapshotLoadError, ConfigurationError)


class TestErrorFormatting:
    def test_str_includes_details(self):
        error = FileSystemError("src/a.py", "permission denied")
        text = str(error)
        assert "src/a.py" in text
        assert "reason=permission denied" in text

    def test_to_json(self):
        error = StorageQueryError("get_implementing_classes", "I1", "connection reset")
        data = error.to_json()
        assert data["error_code"] == "DW200"
        assert data["context"]["key"] == "I1"
        assert data["recoverable"] is True

    def test_process_error_records_timeout(self):
        error = ProcessError("pytest", "timed out", timeout=30)
        assert error.details["timeout"] == "30"
        assert error.timeout == 30

    def test_backup_error_has_recovery_hint(self):
        assert BackupError("/b", "gone").recovery_hint
