"""Base exception for deadwood."""

from typing import Any, Dict, Optional

from .taxonomy import ErrorCode, is_recoverable


class DeadwoodError(Exception):
    """Base exception for all deadwood errors."""

    code: ErrorCode = ErrorCode.DW000

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recovery_hint = recovery_hint

    @property
    def recoverable(self) -> bool:
        return is_recoverable(self.code)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_json(self) -> Dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": dict(self.details),
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
        }
