"""Result wrapper for fallible read-path operations.

Operations that can degrade (a storage lookup that fails, a validation
command that cannot be spawned) return a ``Result`` instead of silently
substituting a default, so callers decide the fallback explicitly.

Usage:
    overrides = safety.fetch_overrides(function_id)
    if overrides.ok:
        rows = overrides.value
    else:
        logger.warning(str(overrides.error))

    rows = overrides.get(default=[])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import DeadwoodError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """A value or the error that prevented producing it, with provenance."""

    _value: T | None = None
    _error: DeadwoodError | None = None
    produced_by: str = ""

    @classmethod
    def success(cls, value: T, produced_by: str = "") -> "Result[T]":
        return cls(_value=value, produced_by=produced_by)

    @classmethod
    def failure(cls, error: DeadwoodError, produced_by: str = "") -> "Result[T]":
        return cls(_error=error, produced_by=produced_by)

    @property
    def ok(self) -> bool:
        return self._error is None

    @property
    def error(self) -> DeadwoodError | None:
        return self._error

    @property
    def value(self) -> T:
        """Get the value. Raises LookupError on a failed result.

        Check .ok before accessing .value.
        """
        if self._error is not None:
            raise LookupError(f"Result failed (produced_by={self.produced_by}): {self._error}")
        return self._value  # type: ignore[return-value]

    def get(self, default: T | None = None) -> T | None:
        """Get value or default if the operation failed."""
        return self._value if self._error is None else default
