"""Select dead functions that are safe candidates for deletion."""

from __future__ import annotations

import re
from fnmatch import fnmatch
from typing import Iterable, Optional

from ..config import DeletionOptions
from ..context import RunContext
from ..graph.builder import build_call_graph
from ..graph.entry_points import EntryPointDetector, EntryReason, is_test_path
from ..graph.metrics import DependencyMetricsCalculator
from ..graph.models import CallEdge, CallGraph, CallType, FunctionInfo
from ..graph.reachability import reachable_from
from ..logging_config import get_logger
from ..typesafety import TypeAwareDeletionSafety, TypeStore
from .models import DeletionCandidate, DeletionReason, Impact, ProtectedFunction

logger = get_logger(__name__)

REASON_CONFIDENCE = {
    DeletionReason.UNREACHABLE: 1.0,
    DeletionReason.ISOLATED: 0.95,
    DeletionReason.NO_HIGH_CONFIDENCE_CALLERS: 0.90,
}

EXTERNAL_PATH_MARKERS = ("site-packages/", "node_modules/", "vendor/", "dist/", "build/")
EXTERNAL_SUFFIXES = (".pyi", ".d.ts")
ANONYMOUS_NAME = re.compile(r"^(<lambda>|anonymous(_\d+)?|arrow_\d+)$")

_EXPORT_REASONS = {EntryReason.EXPORTED, EntryReason.INDEX}
_LOW_CONFIDENCE_TYPES = {CallType.EXTERNAL, CallType.VIRTUAL}


def is_external_path(file_path: str) -> bool:
    path = file_path.replace("\\", "/")
    if path.endswith(EXTERNAL_SUFFIXES):
        return True
    return any(path.startswith(m) or f"/{m}" in path for m in EXTERNAL_PATH_MARKERS)


def is_anonymous(name: str) -> bool:
    return bool(ANONYMOUS_NAME.match(name))


def estimate_impact(fn: FunctionInfo, callers_count: int) -> Impact:
    if fn.is_exported or callers_count > 5:
        return Impact.HIGH
    if fn.size > 20 or callers_count > 2:
        return Impact.MEDIUM
    return Impact.LOW


class DeletionCandidateGenerator:
    """Turn a snapshot into an ordered list of deletion candidates.

    A call edge keeps its callee alive only when it is internal, resolved
    by a direct kind of call and scores at least ``confidence_threshold``.
    Everything reachable from an entry point over such edges is live.

    Args:
        options: Deletion options
        store: Type storage port; without one no function is protected
        context: Run context shared with the type-safety analyzer
    """

    def __init__(
        self,
        options: Optional[DeletionOptions] = None,
        store: Optional[TypeStore] = None,
        context: Optional[RunContext] = None,
    ):
        self.options = options or DeletionOptions()
        self.context = context or RunContext()
        self.safety = TypeAwareDeletionSafety(store, self.context) if store is not None else None
        self.protected: list[ProtectedFunction] = []
        self.warnings: list[str] = []

    def generate(
        self,
        functions: Iterable[FunctionInfo],
        edges: Iterable[CallEdge],
        snapshot_id: str = "",
    ) -> list[DeletionCandidate]:
        self.protected = []
        self.warnings = []
        graph = build_call_graph(functions, edges)
        functions = list(graph.functions.values())

        entry_ids = self._entry_ids(graph)
        strong = [e for e in graph.edges if self.is_high_confidence(e)]
        live = reachable_from(entry_ids, strong)

        strong_callers: dict[str, set[str]] = {}
        for edge in strong:
            strong_callers.setdefault(edge.callee_function_id, set()).add(edge.caller_function_id)

        metrics = DependencyMetricsCalculator().calculate_metrics(
            functions, graph.edges, entry_ids, ()
        )
        by_metric = {m.function_id: m for m in metrics}

        candidates: list[DeletionCandidate] = []
        for fn in functions:
            if fn.id in live or self._excluded(fn):
                continue

            callers_count = len(graph.callers_of(fn.id))
            reason = self._reason(fn, graph, strong_callers, by_metric[fn.id])
            if reason is None:
                continue

            confidence = REASON_CONFIDENCE[reason]
            if confidence < self.options.candidate_min_confidence:
                continue

            type_info = None
            if self.safety is not None:
                type_info = self.safety.analyze_deletion_safety(fn, snapshot_id)
                if type_info.storage_failed:
                    self.warnings.append(
                        f"Type evidence unavailable for {fn.name}; treated as unprotected"
                    )
                if type_info.confidence_score >= self.options.protection_threshold:
                    logger.debug(f"Protected {fn.name}: {type_info.protection_reason}")
                    self.protected.append(
                        ProtectedFunction(
                            fn, type_info.confidence_score, type_info.protection_reason
                        )
                    )
                    continue

            candidates.append(
                DeletionCandidate(
                    function_info=fn,
                    reason=reason,
                    confidence_score=confidence,
                    callers_count=callers_count,
                    estimated_impact=estimate_impact(fn, callers_count),
                    type_info=type_info,
                )
            )

        candidates.sort(
            key=lambda c: (
                -c.confidence_score,
                c.estimated_impact.rank,
                c.function_info.file_path,
                c.function_info.start_line,
                c.function_id,
            )
        )
        logger.info(
            f"Found {len(candidates)} deletion candidate(s), "
            f"{len(self.protected)} protected by type contracts"
        )
        return candidates

    def is_high_confidence(self, edge: CallEdge) -> bool:
        return (
            edge.callee_function_id is not None
            and edge.call_type not in _LOW_CONFIDENCE_TYPES
            and edge.confidence_score >= self.options.confidence_threshold
        )

    def _entry_ids(self, graph: CallGraph) -> set[str]:
        detector = EntryPointDetector(exclude_tests=False)
        reasons: dict[str, set[EntryReason]] = {}
        for ep in detector.detect(graph.functions.values(), graph.edges):
            reasons.setdefault(ep.function_id, set()).add(ep.reason)
        if self.options.include_exports:
            # Exported-only roots become candidates themselves
            return {fid for fid, r in reasons.items() if r - _EXPORT_REASONS}
        return set(reasons)

    def _reason(self, fn, graph: CallGraph, strong_callers, metric) -> Optional[DeletionReason]:
        # Self-recursion never keeps a function alive
        callers = set(graph.callers_of(fn.id)) - {fn.id}
        strong = strong_callers.get(fn.id, set()) - {fn.id}
        if metric.fan_in == 0 and metric.fan_out == 0:
            return DeletionReason.ISOLATED
        if not callers:
            return DeletionReason.UNREACHABLE
        if not strong:
            return DeletionReason.NO_HIGH_CONFIDENCE_CALLERS

        message = (
            f"Skipping {fn.name} ({fn.id}): unreachable but still called by "
            f"{len(strong)} function(s) with high confidence"
        )
        logger.warning(message)
        self.warnings.append(message)
        return None

    def _excluded(self, fn: FunctionInfo) -> bool:
        options = self.options
        if fn.is_exported and not options.include_exports:
            return True
        if fn.is_static and not options.include_static_methods:
            return True
        if options.exclude_tests and is_test_path(fn.file_path):
            return True
        if is_external_path(fn.file_path) or is_anonymous(fn.name):
            return True
        path = fn.file_path.replace("\\", "/")
        return any(fnmatch(path, pattern) for pattern in options.exclude_patterns)
