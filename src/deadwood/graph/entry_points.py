"""Entry point detection: which functions are reachability roots.

A function is an entry point for every reason that matches (the result is
the union of all heuristics). Over-inclusion only weakens dead-code
precision; missing an exported function would make it look dead, so every
exported function is always a root.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..logging_config import get_logger
from .models import CallEdge, CallType, FunctionInfo

logger = get_logger(__name__)


class EntryReason(Enum):
    EXPORTED = "exported"
    MAIN = "main"
    TEST = "test"
    CLI = "cli"
    HANDLER = "handler"
    INDEX = "index"
    CALLBACK = "callback"


@dataclass(frozen=True)
class EntryPoint:
    function_id: str
    reason: EntryReason


TEST_FILE_PATTERNS = [
    re.compile(r"\.(test|spec|integration|e2e)\.[jt]sx?$"),
    re.compile(r"(^|/)test_[^/]*\.py$"),
    re.compile(r"_test\.(py|go)$"),
    re.compile(r"(^|/)conftest\.py$"),
    re.compile(r"(^|/)(__tests__|tests?|e2e|cypress|playwright)/"),
]

CLI_FILE_PATTERNS = [
    re.compile(r"(^|/)cli\.(py|[jt]s)$"),
    re.compile(r"(^|/)cli/"),
    re.compile(r"(^|/)__main__\.py$"),
    re.compile(r"(^|/)(bin|scripts)/"),
]

MAIN_FILE_PATTERNS = [
    re.compile(r"(^|/)(index|main|app)\.([jt]sx?|py)$"),
    re.compile(r"(^|/)__main__\.py$"),
]

HANDLER_NAME_PATTERN = re.compile(r"handler|controller|route|endpoint", re.IGNORECASE)


def _normalize(path: str) -> str:
    return path.replace("\\", "/")


def is_test_path(file_path: str) -> bool:
    """True for files that hold tests under common Python and JS/TS layouts."""
    path = _normalize(file_path)
    return any(p.search(path) for p in TEST_FILE_PATTERNS)


def is_cli_path(file_path: str) -> bool:
    path = _normalize(file_path)
    return any(p.search(path) for p in CLI_FILE_PATTERNS)


def is_main_path(file_path: str) -> bool:
    path = _normalize(file_path)
    return any(p.search(path) for p in MAIN_FILE_PATTERNS)


class EntryPointDetector:
    """Classify functions as externally invoked roots.

    Args:
        exclude_tests: Do not treat test functions as roots. Code only
            reached from tests then shows up as unreachable.
    """

    def __init__(self, exclude_tests: bool = False):
        self.exclude_tests = exclude_tests

    def detect(
        self, functions: Iterable[FunctionInfo], edges: Iterable[CallEdge] = ()
    ) -> list[EntryPoint]:
        """Return one EntryPoint per (function, reason) pair, in input order."""
        callbacks = self._callback_targets(edges)
        entry_points: list[EntryPoint] = []
        for fn in functions:
            for reason in self._reasons(fn, callbacks):
                entry_points.append(EntryPoint(fn.id, reason))

        if logger.isEnabledFor(logging.DEBUG):
            counts: dict[str, int] = {}
            for ep in entry_points:
                counts[ep.reason.value] = counts.get(ep.reason.value, 0) + 1
            logger.debug(f"Detected {len(entry_points)} entry point(s): {counts}")
        return entry_points

    def detect_ids(
        self, functions: Iterable[FunctionInfo], edges: Iterable[CallEdge] = ()
    ) -> set[str]:
        return {ep.function_id for ep in self.detect(functions, edges)}

    def _reasons(self, fn: FunctionInfo, callbacks: set[str]) -> list[EntryReason]:
        reasons: list[EntryReason] = []

        if fn.is_exported:
            reasons.append(EntryReason.EXPORTED)

        if fn.id in callbacks:
            reasons.append(EntryReason.CALLBACK)

        if is_test_path(fn.file_path):
            # Everything in a test file is invoked by the test runner
            if not self.exclude_tests:
                reasons.append(EntryReason.TEST)
            return reasons

        if is_cli_path(fn.file_path):
            reasons.append(EntryReason.CLI)

        top_level = not fn.is_method and fn.class_name is None
        if top_level and (is_main_path(fn.file_path) or fn.name == "main"):
            reasons.append(EntryReason.MAIN)

        if HANDLER_NAME_PATTERN.search(fn.name):
            reasons.append(EntryReason.HANDLER)

        if fn.is_exported and is_main_path(fn.file_path):
            reasons.append(EntryReason.INDEX)

        return reasons

    @staticmethod
    def _callback_targets(edges: Iterable[CallEdge]) -> set[str]:
        # Upstream emits framework registrations (command actions, route
        # handlers, signal connections) as resolved virtual edges.
        return {
            e.callee_function_id
            for e in edges
            if e.call_type is CallType.VIRTUAL and e.callee_function_id is not None
        }
