"""Strongly connected components and bounded simple-cycle enumeration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class CycleEnumeration:
    """Simple cycles found by a capped search.

    Each cycle starts at its lexicographically smallest id; the closing edge
    back to ``cycle[0]`` is implied. ``truncated`` is set when a cap stopped
    the search, so more cycles may exist.
    """

    cycles: list[list[str]] = field(default_factory=list)
    truncated: bool = False
    truncated_by: Optional[str] = None
    steps: int = 0


def tarjan_scc(adjacency: dict[str, list[str]], all_nodes: Iterable[str]) -> list[set[str]]:
    """Tarjan's algorithm for strongly connected components (iterative).

    Uses an explicit call stack to avoid Python recursion limits on deep
    call chains. Roots are visited in sorted order so the component order
    is deterministic.
    """
    nodes = set(all_nodes)
    counter = 0
    scc_stack: list[str] = []
    on_stack: set[str] = set()
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    result: list[set[str]] = []

    def neighbors(v: str) -> Iterator[str]:
        return iter([w for w in adjacency.get(v, []) if w in nodes])

    for root in sorted(nodes):
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        scc_stack.append(root)
        on_stack.add(root)
        call_stack: list[tuple[str, Iterator[str]]] = [(root, neighbors(root))]

        while call_stack:
            v, it = call_stack[-1]
            pushed = False
            for w in it:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    scc_stack.append(w)
                    on_stack.add(w)
                    call_stack.append((w, neighbors(w)))
                    pushed = True
                    break
                elif w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])

            if not pushed:
                call_stack.pop()
                if call_stack:
                    caller = call_stack[-1][0]
                    lowlink[caller] = min(lowlink[caller], lowlink[v])

                if lowlink[v] == index[v]:
                    component: set[str] = set()
                    while True:
                        w = scc_stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    result.append(component)

    return result


def enumerate_simple_cycles(
    adjacency: dict[str, list[str]],
    all_nodes: Iterable[str],
    max_cycles: int = 1000,
    max_length: int = 12,
    max_search_steps: int = 200_000,
) -> CycleEnumeration:
    """Enumerate simple cycles, each exactly once, under hard caps.

    For every start node ``s`` (sorted), a depth-first search follows only
    nodes greater than ``s`` inside ``s``'s strongly connected component and
    reports each path that closes back on ``s``. A cycle is therefore found
    only from its smallest member, which makes the rotation canonical and
    removes duplicates without a seen-set. Self-loops are length-1 cycles.

    Caps:
        max_cycles: keep at most this many cycles; finding one more truncates
        max_length: never extend a path beyond this many nodes
        max_search_steps: total edge expansions across the whole search

    Finding a cycle beyond ``max_cycles``, or exhausting ``max_search_steps``,
    sets ``truncated``. Paths cut by ``max_length`` are reported the same
    way, since a longer cycle might have been skipped.
    """
    nodes = set(all_nodes)
    result = CycleEnumeration()

    component_of: dict[str, int] = {}
    for i, scc in enumerate(tarjan_scc(adjacency, nodes)):
        if len(scc) > 1:
            for n in scc:
                component_of[n] = i

    def stop(reason: str) -> CycleEnumeration:
        result.truncated = True
        result.truncated_by = reason
        logger.warning(
            f"Cycle enumeration stopped by {reason} after {len(result.cycles)} cycle(s) "
            f"and {result.steps} step(s); results are incomplete"
        )
        return result

    for start in sorted(nodes):
        if start in adjacency.get(start, []):
            if len(result.cycles) >= max_cycles:
                return stop("max_cycles")
            result.cycles.append([start])

        comp = component_of.get(start)
        if comp is None:
            continue
        if max_length < 2:
            result.truncated = True
            result.truncated_by = "max_length"
            continue

        def successors(v: str, start: str = start, comp: int = comp) -> Iterator[str]:
            return iter(
                [
                    w
                    for w in adjacency.get(v, [])
                    if w == start or (w > start and component_of.get(w) == comp)
                ]
            )

        path = [start]
        on_path = {start}
        stack = [successors(start)]

        while stack:
            w = next(stack[-1], None)
            if w is None:
                stack.pop()
                on_path.discard(path.pop())
                continue

            result.steps += 1
            if result.steps > max_search_steps:
                return stop("max_search_steps")

            if w == start:
                if len(path) > 1:
                    if len(result.cycles) >= max_cycles:
                        return stop("max_cycles")
                    result.cycles.append(list(path))
            elif w not in on_path:
                if len(path) >= max_length:
                    if not result.truncated:
                        result.truncated = True
                        result.truncated_by = "max_length"
                    continue
                path.append(w)
                on_path.add(w)
                stack.append(successors(w))

    if result.truncated_by == "max_length":
        logger.warning(
            f"Cycle search was limited to length {max_length}; longer cycles may be missing"
        )
    return result
