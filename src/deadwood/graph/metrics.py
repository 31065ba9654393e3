"""Per-function dependency metrics and codebase-wide aggregates."""

from __future__ import annotations

from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from ..config import MetricsOptions
from .cycles import tarjan_scc
from .models import CallEdge, FunctionInfo


@dataclass
class DependencyMetrics:
    """Call graph measurements for one function.

    fan_in/fan_out count distinct callers/callees; total_callers/total_calls
    count every call site. depth_from_entry is -1 when unreachable.
    max_call_chain is the longest chain of calls starting here, with each
    cycle counted as a single step.
    """

    function_id: str
    function_name: str
    file_path: str
    fan_in: int = 0
    fan_out: int = 0
    total_callers: int = 0
    total_calls: int = 0
    depth_from_entry: int = -1
    max_call_chain: int = 0
    is_cyclic: bool = False
    is_recursive: bool = False


@dataclass
class DependencyStats:
    total_functions: int = 0
    avg_fan_in: float = 0.0
    avg_fan_out: float = 0.0
    max_fan_in: int = 0
    max_fan_out: int = 0
    hub_functions: list[DependencyMetrics] = field(default_factory=list)
    utility_functions: list[DependencyMetrics] = field(default_factory=list)
    isolated_functions: list[DependencyMetrics] = field(default_factory=list)


def compute_depth_from_entry(
    adjacency: dict[str, list[str]], entry_points: Iterable[str], all_nodes: Iterable[str]
) -> dict[str, int]:
    """Multi-source BFS hop count from the nearest entry point (-1 if unreachable)."""
    depth: dict[str, int] = dict.fromkeys(all_nodes, -1)
    queue: deque[str] = deque()
    for ep in sorted(entry_points):
        if ep in depth and depth[ep] != 0:
            depth[ep] = 0
            queue.append(ep)

    while queue:
        node = queue.popleft()
        for callee in adjacency.get(node, []):
            if depth.get(callee, 0) == -1:
                depth[callee] = depth[node] + 1
                queue.append(callee)
    return depth


def compute_max_call_chain(
    adjacency: dict[str, list[str]], all_nodes: Iterable[str]
) -> dict[str, int]:
    """Longest call chain from each node over the SCC condensation.

    Tarjan emits components sinks-first, so every successor component is
    final before its predecessors are visited.
    """
    nodes = set(all_nodes)
    components = tarjan_scc(adjacency, nodes)
    comp_of = {n: i for i, comp in enumerate(components) for n in comp}
    chain_of_comp: list[int] = [0] * len(components)

    for i, comp in enumerate(components):
        best = 0
        for n in comp:
            for callee in adjacency.get(n, []):
                j = comp_of.get(callee)
                if j is not None and j != i:
                    best = max(best, chain_of_comp[j] + 1)
        chain_of_comp[i] = best

    return {n: chain_of_comp[comp_of[n]] for n in nodes}


class DependencyMetricsCalculator:
    """Fan-in/fan-out, depth and hub/utility/isolated classification."""

    def calculate_metrics(
        self,
        functions: Iterable[FunctionInfo],
        edges: Iterable[CallEdge],
        entry_point_ids: Iterable[str],
        cyclic_function_ids: Iterable[str],
    ) -> list[DependencyMetrics]:
        """One DependencyMetrics per function, in input order.

        Edges referencing unknown functions or external callees are ignored.
        """
        functions = list(functions)
        known = {fn.id for fn in functions}
        cyclic = set(cyclic_function_ids)

        callers: dict[str, set[str]] = defaultdict(set)
        callees: dict[str, set[str]] = defaultdict(set)
        caller_sites: Counter[str] = Counter()
        call_sites: Counter[str] = Counter()
        recursive: set[str] = set()

        for edge in edges:
            src, dst = edge.caller_function_id, edge.callee_function_id
            if src not in known or dst is None or dst not in known:
                continue
            callees[src].add(dst)
            callers[dst].add(src)
            call_sites[src] += 1
            caller_sites[dst] += 1
            if src == dst:
                recursive.add(src)

        adjacency = {k: sorted(v) for k, v in callees.items()}
        depth = compute_depth_from_entry(adjacency, entry_point_ids, known)
        chain = compute_max_call_chain(adjacency, known)

        return [
            DependencyMetrics(
                function_id=fn.id,
                function_name=fn.name,
                file_path=fn.file_path,
                fan_in=len(callers.get(fn.id, ())),
                fan_out=len(callees.get(fn.id, ())),
                total_callers=caller_sites[fn.id],
                total_calls=call_sites[fn.id],
                depth_from_entry=depth[fn.id],
                max_call_chain=chain[fn.id],
                is_cyclic=fn.id in cyclic,
                is_recursive=fn.id in recursive,
            )
            for fn in functions
        ]

    def generate_stats(
        self,
        metrics: list[DependencyMetrics],
        options: Optional[MetricsOptions] = None,
        entry_point_ids: Iterable[str] = (),
    ) -> DependencyStats:
        """Aggregate fan-in/fan-out and pick hub, utility and isolated functions.

        Hubs and utilities are sorted by fan-in/fan-out descending, ties by
        function id, and capped. Isolated functions exclude entry points.
        """
        options = options or MetricsOptions()
        entries = set(entry_point_ids)
        if not metrics:
            return DependencyStats()

        fan_in = np.array([m.fan_in for m in metrics], dtype=float)
        fan_out = np.array([m.fan_out for m in metrics], dtype=float)

        hubs = sorted(
            (m for m in metrics if m.fan_in >= options.hub_threshold),
            key=lambda m: (-m.fan_in, m.function_id),
        )
        utilities = sorted(
            (m for m in metrics if m.fan_out >= options.utility_threshold),
            key=lambda m: (-m.fan_out, m.function_id),
        )
        isolated = sorted(
            (
                m
                for m in metrics
                if m.fan_in == 0 and m.fan_out == 0 and m.function_id not in entries
            ),
            key=lambda m: m.function_id,
        )

        return DependencyStats(
            total_functions=len(metrics),
            avg_fan_in=float(np.mean(fan_in)),
            avg_fan_out=float(np.mean(fan_out)),
            max_fan_in=int(np.max(fan_in)),
            max_fan_out=int(np.max(fan_out)),
            hub_functions=hubs[: options.max_hub_functions],
            utility_functions=utilities[: options.max_utility_functions],
            isolated_functions=isolated,
        )
