"""Error codes for structured logging and JSON output.

Error Code Convention:
    DW0xx - Generic errors
    DW1xx - Graph data integrity errors
    DW2xx - Storage query errors
    DW3xx - Filesystem and backup errors
    DW4xx - Validation subprocess errors
    DW8xx - Option validation errors
    DW9xx - Snapshot input errors
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    DW000 = "DW000"  # Unclassified

    # Graph data integrity (DW1xx)
    DW100 = "DW100"  # Edge references unknown function

    # Storage (DW2xx)
    DW200 = "DW200"  # Type store query failed

    # Filesystem (DW3xx)
    DW300 = "DW300"  # Read/write/rename failed
    DW301 = "DW301"  # Backup missing or corrupt
    DW302 = "DW302"  # File changed since backup

    # Validation subprocess (DW4xx)
    DW400 = "DW400"  # Could not spawn or timed out

    # Options (DW8xx)
    DW800 = "DW800"  # Invalid option value
    DW801 = "DW801"  # Conflicting options

    # Snapshot input (DW9xx)
    DW900 = "DW900"  # Snapshot unreadable or malformed


# Errors the pipeline absorbs (logged, work continues) vs. errors that abort.
RECOVERABLE_CODES = frozenset(
    {
        ErrorCode.DW100,
        ErrorCode.DW200,
        ErrorCode.DW300,
        ErrorCode.DW302,
        ErrorCode.DW400,
    }
)


def is_recoverable(code: ErrorCode) -> bool:
    return code in RECOVERABLE_CODES
