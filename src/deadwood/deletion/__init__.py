"""Safe deletion: candidate selection, backup, batched mutation and rollback."""

from .backup import Backup
from .candidates import DeletionCandidateGenerator
from .deleter import merge_ranges, remove_line_ranges
from .models import (
    BatchOutcome,
    CheckOutcome,
    DeletionCandidate,
    DeletionReason,
    Impact,
    ProtectedFunction,
    SafeDeletionResult,
    ValidationRecord,
)
from .system import SafeDeletionSystem
from .validation import CommandValidator, NullValidator, ValidationPort, run_validation

__all__ = [
    "Backup",
    "DeletionCandidateGenerator",
    "merge_ranges",
    "remove_line_ranges",
    "BatchOutcome",
    "CheckOutcome",
    "DeletionCandidate",
    "DeletionReason",
    "Impact",
    "ProtectedFunction",
    "SafeDeletionResult",
    "ValidationRecord",
    "SafeDeletionSystem",
    "CommandValidator",
    "NullValidator",
    "ValidationPort",
    "run_validation",
]
