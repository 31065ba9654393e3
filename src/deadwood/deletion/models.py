"""Data models for safe deletion runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..graph.models import FunctionInfo
from ..typesafety.models import DeletionSafetyInfo


class DeletionReason(Enum):
    UNREACHABLE = "unreachable"
    NO_HIGH_CONFIDENCE_CALLERS = "no-high-confidence-callers"
    ISOLATED = "isolated"


class Impact(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 0, "medium": 1, "high": 2}[self.value]


@dataclass
class DeletionCandidate:
    function_info: FunctionInfo
    reason: DeletionReason
    confidence_score: float
    callers_count: int = 0
    estimated_impact: Impact = Impact.LOW
    type_info: Optional[DeletionSafetyInfo] = None

    @property
    def function_id(self) -> str:
        return self.function_info.id


@dataclass(frozen=True)
class ProtectedFunction:
    """A dead-looking function kept because a type contract binds it."""

    function_info: FunctionInfo
    confidence_score: float
    protection_reason: Optional[str]


@dataclass(frozen=True)
class CheckOutcome:
    """Result of one external check.

    ``performed=False`` means the check could not run (not configured,
    timed out, failed to launch); it is "N/A", never a failure.
    """

    passed: bool = False
    performed: bool = False
    output: str = ""


@dataclass(frozen=True)
class ValidationRecord:
    type_check: CheckOutcome = field(default_factory=CheckOutcome)
    tests: CheckOutcome = field(default_factory=CheckOutcome)

    @property
    def performed(self) -> bool:
        return self.type_check.performed or self.tests.performed

    @property
    def type_check_passed(self) -> Optional[bool]:
        return self.type_check.passed if self.type_check.performed else None

    @property
    def tests_passed(self) -> Optional[bool]:
        return self.tests.passed if self.tests.performed else None

    def regressed_from(self, baseline: "ValidationRecord") -> list[str]:
        """Checks that ran, failed, and did not already fail at baseline."""
        regressions = []
        if self.type_check_passed is False and baseline.type_check_passed is not False:
            regressions.append("type check")
        if self.tests_passed is False and baseline.tests_passed is not False:
            regressions.append("tests")
        return regressions

    def to_dict(self) -> dict:
        return {
            "performed": self.performed,
            "type_check_passed": self.type_check_passed,
            "tests_passed": self.tests_passed,
        }


@dataclass
class BatchOutcome:
    index: int
    function_ids: list[str]
    committed: bool = False
    validation: Optional[ValidationRecord] = None
    error: Optional[str] = None


@dataclass
class SafeDeletionResult:
    """Outcome of one run.

    Partial success is normal: some batches may be committed while others
    were rolled back and their functions listed in ``skipped_functions``.
    ``backup_path`` is set iff a mutation was attempted.
    """

    candidate_functions: list[DeletionCandidate] = field(default_factory=list)
    deleted_functions: list[DeletionCandidate] = field(default_factory=list)
    skipped_functions: list[DeletionCandidate] = field(default_factory=list)
    protected_functions: list[ProtectedFunction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    backup_path: Optional[str] = None
    pre_delete_validation: Optional[ValidationRecord] = None
    post_delete_validation: Optional[ValidationRecord] = None
    batches: list[BatchOutcome] = field(default_factory=list)
    preview: bool = True
