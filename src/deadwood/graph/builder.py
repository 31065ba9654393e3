"""Build a CallGraph from raw snapshot records."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ..exceptions import DataIntegrityError
from ..logging_config import get_logger
from .models import CallEdge, CallGraph, FunctionInfo

logger = get_logger(__name__)


def build_call_graph(
    functions: Iterable[FunctionInfo], edges: Iterable[CallEdge]
) -> CallGraph:
    """Index functions and split edges into internal, external and skipped.

    An edge whose caller (or non-null callee) is not a known function is a
    data integrity violation: it is logged, kept in ``skipped_edges`` and
    otherwise ignored so the rest of the analysis proceeds.
    """
    graph = CallGraph()
    for fn in functions:
        if fn.id in graph.functions:
            logger.warning(f"Duplicate function id {fn.id}; keeping the first record")
            continue
        graph.functions[fn.id] = fn

    forward: dict[str, set[str]] = defaultdict(set)
    backward: dict[str, set[str]] = defaultdict(set)

    for edge in edges:
        try:
            _check_edge(edge, graph.functions)
        except DataIntegrityError as e:
            logger.warning(str(e))
            graph.skipped_edges.append(edge)
            continue

        if edge.callee_function_id is None:
            graph.external_edges.append(edge)
            continue

        graph.edges.append(edge)
        graph.edge_count += 1
        forward[edge.caller_function_id].add(edge.callee_function_id)
        backward[edge.callee_function_id].add(edge.caller_function_id)

    graph.adjacency = {node: sorted(targets) for node, targets in sorted(forward.items())}
    graph.reverse = {node: sorted(sources) for node, sources in sorted(backward.items())}

    if graph.skipped_edges:
        logger.warning(
            f"Skipped {len(graph.skipped_edges)} call edge(s) referencing unknown functions"
        )
    return graph


def _check_edge(edge: CallEdge, functions: dict[str, FunctionInfo]) -> None:
    if edge.caller_function_id not in functions:
        raise DataIntegrityError(edge.ref(), edge.caller_function_id, "caller")
    if edge.callee_function_id is not None and edge.callee_function_id not in functions:
        raise DataIntegrityError(edge.ref(), edge.callee_function_id, "callee")
