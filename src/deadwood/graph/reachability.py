"""Reachability over the call graph: live set, dead code and raw cycles."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..config import CycleOptions
from ..logging_config import get_logger
from .cycles import CycleEnumeration, enumerate_simple_cycles, tarjan_scc
from .entry_points import is_test_path
from .models import CallEdge, FunctionInfo

logger = get_logger(__name__)


@dataclass
class ReachabilityResult:
    reachable: set[str] = field(default_factory=set)
    unreachable: set[str] = field(default_factory=set)
    unused_exports: set[str] = field(default_factory=set)
    entry_points: set[str] = field(default_factory=set)


class DeadCodeReason(Enum):
    UNREACHABLE = "unreachable"
    NO_CALLERS = "no-callers"
    TEST_ONLY = "test-only"


@dataclass(frozen=True)
class DeadCodeInfo:
    function_id: str
    function_name: str
    file_path: str
    start_line: int
    end_line: int
    size: int
    reason: DeadCodeReason


def forward_adjacency(edges: Iterable[CallEdge]) -> dict[str, list[str]]:
    """caller -> sorted distinct callees, internal edges only."""
    adjacency: dict[str, set[str]] = defaultdict(set)
    for edge in edges:
        if edge.callee_function_id is not None:
            adjacency[edge.caller_function_id].add(edge.callee_function_id)
    return {k: sorted(v) for k, v in sorted(adjacency.items())}


def reverse_adjacency(edges: Iterable[CallEdge]) -> dict[str, set[str]]:
    """callee -> distinct callers, internal edges only."""
    reverse: dict[str, set[str]] = defaultdict(set)
    for edge in edges:
        if edge.callee_function_id is not None:
            reverse[edge.callee_function_id].add(edge.caller_function_id)
    return dict(reverse)


def reachable_from(entry_ids: Iterable[str], edges: Iterable[CallEdge]) -> set[str]:
    """BFS closure of ``entry_ids`` under caller -> callee edges.

    Entry ids are part of the result even when they have no edges.
    """
    adjacency = forward_adjacency(edges)
    visited: set[str] = set(entry_ids)
    queue: deque[str] = deque(sorted(visited))
    while queue:
        node = queue.popleft()
        for callee in adjacency.get(node, []):
            if callee not in visited:
                visited.add(callee)
                queue.append(callee)
    return visited


def analyze_reachability(
    functions: Iterable[FunctionInfo],
    edges: Iterable[CallEdge],
    entry_ids: Iterable[str],
) -> ReachabilityResult:
    """Split functions into reachable and unreachable sets.

    ``unused_exports`` are exported functions nothing internal calls; they
    stay reachable (exports are roots) but are worth reporting.
    """
    functions = list(functions)
    edges = list(edges)
    all_ids = {fn.id for fn in functions}
    entries = set(entry_ids) & all_ids

    reachable = reachable_from(entries, edges) & all_ids
    callers = reverse_adjacency(edges)
    unused_exports = {
        fn.id
        for fn in functions
        if fn.is_exported and not (callers.get(fn.id, set()) - {fn.id})
    }

    result = ReachabilityResult(
        reachable=reachable,
        unreachable=all_ids - reachable,
        unused_exports=unused_exports,
        entry_points=entries,
    )
    logger.info(
        f"Reachability: {len(result.reachable)} reachable, "
        f"{len(result.unreachable)} unreachable from {len(entries)} entry point(s)"
    )
    return result


def get_dead_code_info(
    unreachable: Iterable[str],
    functions: Iterable[FunctionInfo],
    edges: Iterable[CallEdge],
    exclude_tests: bool = False,
    min_function_size: int = 0,
) -> list[DeadCodeInfo]:
    """Describe unreachable functions, sorted by file then start line.

    Reasons: ``no-callers`` when nothing calls it, ``test-only`` when every
    caller lives in a test file, ``unreachable`` otherwise (called only from
    other dead code).
    """
    by_id = {fn.id: fn for fn in functions}
    callers = reverse_adjacency(edges)
    info: list[DeadCodeInfo] = []

    for function_id in unreachable:
        fn = by_id.get(function_id)
        if fn is None:
            continue
        if exclude_tests and is_test_path(fn.file_path):
            continue
        if fn.size < min_function_size:
            continue

        fn_callers = callers.get(function_id, set())
        if not fn_callers:
            reason = DeadCodeReason.NO_CALLERS
        elif all(c in by_id and is_test_path(by_id[c].file_path) for c in fn_callers):
            reason = DeadCodeReason.TEST_ONLY
        else:
            reason = DeadCodeReason.UNREACHABLE

        info.append(
            DeadCodeInfo(
                function_id=fn.id,
                function_name=fn.name,
                file_path=fn.file_path,
                start_line=fn.start_line,
                end_line=fn.end_line,
                size=fn.size,
                reason=reason,
            )
        )

    info.sort(key=lambda d: (d.file_path, d.start_line, d.function_id))
    return info


def find_circular_dependencies(
    edges: Iterable[CallEdge], options: Optional[CycleOptions] = None
) -> CycleEnumeration:
    """Enumerate simple call cycles under the caps in ``options``.

    External and unresolved virtual edges never take part. Cycles shorter
    than ``options.min_size`` are dropped after enumeration.
    """
    options = options or CycleOptions()
    adjacency = forward_adjacency(edges)
    nodes: set[str] = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)

    enumeration = enumerate_simple_cycles(
        adjacency,
        nodes,
        max_cycles=options.max_cycles,
        max_length=options.max_length,
        max_search_steps=options.max_search_steps,
    )
    if options.min_size > 1:
        enumeration.cycles = [c for c in enumeration.cycles if len(c) >= options.min_size]
    return enumeration


def strongly_connected_components(edges: Iterable[CallEdge]) -> list[set[str]]:
    """Components of the internal call graph, including singletons."""
    adjacency = forward_adjacency(edges)
    nodes: set[str] = set(adjacency)
    for targets in adjacency.values():
        nodes.update(targets)
    return tarjan_scc(adjacency, nodes)


def cyclic_function_ids(edges: Iterable[CallEdge]) -> set[str]:
    """Functions on at least one cycle: multi-node SCCs plus self-loops.

    Unlike enumeration this is exact and linear, so metrics never depend on
    enumeration caps.
    """
    edges = list(edges)
    cyclic: set[str] = set()
    for scc in strongly_connected_components(edges):
        if len(scc) > 1:
            cyclic.update(scc)
    for edge in edges:
        if edge.callee_function_id == edge.caller_function_id:
            cyclic.add(edge.caller_function_id)
    return cyclic
