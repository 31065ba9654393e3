"""Classify raw call cycles by type, boundary crossing and severity."""

from __future__ import annotations

import hashlib
from collections import Counter
from typing import Iterable, Optional

from ..architecture.boundaries import resolve_scope
from ..config import CycleOptions
from ..context import RunContext
from ..graph.models import CallEdge, FunctionInfo
from ..graph.reachability import find_circular_dependencies
from ..logging_config import get_logger
from .models import (
    ClassifiedCycle,
    CycleImportance,
    CyclesAnalysisResult,
    CycleType,
    FilterStats,
)
from .recommendations import recommend

logger = get_logger(__name__)

MAX_SCORE = 10.0
SIZE_FACTOR_CAP = 2.0
COMPLEXITY_FACTOR_CAP = 1.5


def cycle_id(nodes: list[str]) -> str:
    """Stable id from the canonical node order."""
    digest = hashlib.sha1("|".join(nodes).encode("utf-8")).hexdigest()
    return f"cyc_{digest[:10]}"


def importance_for(cross_layer: bool, cross_module: bool, cross_file: bool) -> CycleImportance:
    if cross_layer:
        return CycleImportance.CRITICAL
    if cross_module:
        return CycleImportance.HIGH
    if cross_file:
        return CycleImportance.MEDIUM
    return CycleImportance.LOW


def score_cycle(importance: CycleImportance, size: int, total_complexity: int) -> float:
    """Severity in [0, 10].

    base(importance) x size factor x complexity factor, where the size
    factor grows 0.1 per extra node (capped at 2.0) and the complexity
    factor grows 0.05 per unit of average member complexity (capped at 1.5).
    Non-decreasing in importance, size and summed complexity.
    """
    size_factor = min(1 + (size - 1) * 0.1, SIZE_FACTOR_CAP)
    average = total_complexity / size if size else 0.0
    complexity_factor = min(1 + average * 0.05, COMPLEXITY_FACTOR_CAP)
    score = round(importance.base_score * size_factor * complexity_factor, 1)
    return max(0.0, min(score, MAX_SCORE))


class EnhancedCycleAnalyzer:
    """Turn raw cycles into scored, filtered, ordered ClassifiedCycles.

    Args:
        context: Run context whose scope cache is reused across calls.
            A fresh one is created when omitted.
    """

    def __init__(self, context: Optional[RunContext] = None):
        self.context = context or RunContext()

    def analyze_classified_cycles(
        self,
        edges: Iterable[CallEdge],
        functions: Iterable[FunctionInfo],
        options: Optional[CycleOptions] = None,
    ) -> CyclesAnalysisResult:
        options = options or CycleOptions()
        by_id = {fn.id: fn for fn in functions}

        enumeration = find_circular_dependencies(edges, options)
        classified: list[ClassifiedCycle] = []
        for nodes in enumeration.cycles:
            missing = [n for n in nodes if n not in by_id]
            if missing:
                logger.warning(f"Skipping cycle with unknown function(s): {', '.join(missing)}")
                continue
            classified.append(self.classify(nodes, by_id, options))

        classified.sort(key=lambda c: (-c.score, c.id))
        filtered, stats = self.apply_filters(classified, by_id, options)

        summary = Counter(c.importance.value for c in filtered)
        return CyclesAnalysisResult(
            classified_cycles=filtered,
            total_cycles=len(classified),
            filtered_cycles=len(filtered),
            filter_stats=stats,
            importance_summary={imp.value: summary.get(imp.value, 0) for imp in CycleImportance},
            truncated=enumeration.truncated,
        )

    def classify(
        self, nodes: list[str], by_id: dict[str, FunctionInfo], options: CycleOptions
    ) -> ClassifiedCycle:
        members = [by_id[n] for n in nodes]
        files = sorted({fn.file_path for fn in members})
        scopes = [resolve_scope(fn.file_path, options.source_root, self.context) for fn in members]
        modules = sorted({s.module for s in scopes})
        layers = sorted({s.layer for s in scopes})

        cross_file = len(files) > 1
        cross_module = len(modules) > 1
        cross_layer = len(layers) > 1
        importance = importance_for(cross_layer, cross_module, cross_file)

        total_complexity = sum(fn.cyclomatic_complexity for fn in members)
        cycle = ClassifiedCycle(
            id=cycle_id(nodes),
            nodes=list(nodes),
            type=CycleType.for_length(len(nodes)),
            importance=importance,
            score=score_cycle(importance, len(nodes), total_complexity),
            cross_file=cross_file,
            cross_module=cross_module,
            cross_layer=cross_layer,
            file_count=len(files),
            module_count=len(modules),
            layer_count=len(layers),
            cyclomatic_complexity=total_complexity,
            average_complexity=round(total_complexity / len(nodes), 2),
            node_names=[fn.name for fn in members],
            files=files,
            modules=modules,
            layers=layers,
        )
        cycle.recommendations = recommend(cycle)
        return cycle

    @staticmethod
    def apply_filters(
        cycles: list[ClassifiedCycle],
        by_id: dict[str, FunctionInfo],
        options: CycleOptions,
    ) -> tuple[list[ClassifiedCycle], FilterStats]:
        """Apply enabled filters in a fixed order, counting removals per filter."""
        stats = FilterStats()
        remaining = list(cycles)
        clear_names = set(options.clear_names)

        def keep(name: str, predicate) -> None:
            nonlocal remaining
            kept = [c for c in remaining if predicate(c)]
            setattr(stats, name, len(remaining) - len(kept))
            remaining = kept

        if options.exclude_recursive:
            keep("exclude_recursive", lambda c: c.type is not CycleType.RECURSIVE)
        if options.recursive_only:
            keep("recursive_only", lambda c: c.type is CycleType.RECURSIVE)
        if options.exclude_clear:
            keep(
                "exclude_clear",
                lambda c: not any(by_id[n].name in clear_names for n in c.nodes),
            )
        if options.min_complexity > 1 and not options.recursive_only:
            keep("min_complexity", lambda c: c.size >= options.min_complexity)
        if options.cross_layer_only:
            keep("cross_layer_only", lambda c: c.cross_layer)
        if options.cross_module_only:
            keep("cross_module_only", lambda c: c.cross_module)

        return remaining, stats
