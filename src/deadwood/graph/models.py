"""Data models for the function call graph.

Records arrive from an upstream extraction pass, one immutable snapshot at a
time. Nothing in this package mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CallType(Enum):
    """How a call site invokes its callee."""

    DIRECT = "direct"
    ASYNC = "async"
    CONDITIONAL = "conditional"
    EXTERNAL = "external"
    VIRTUAL = "virtual"


@dataclass(frozen=True)
class FunctionInfo:
    """One function or method in a snapshot.

    ``id`` is unique per snapshot. ``file_path`` and the line range are
    used for file/module/layer grouping and for source removal.
    """

    id: str
    name: str
    file_path: str
    start_line: int
    end_line: int
    cyclomatic_complexity: int = 1
    semantic_id: str = ""
    is_exported: bool = False
    is_static: bool = False
    is_method: bool = False
    class_name: Optional[str] = None
    signature: str = ""
    parameters: tuple[str, ...] = ()
    return_type: str = ""

    @property
    def size(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class CallEdge:
    """A caller -> callee call site.

    ``callee_function_id`` is None for external or unresolved virtual calls;
    such edges are terminals and never part of reachability or cycles.
    """

    caller_function_id: str
    callee_function_id: Optional[str]
    callee_name: str
    call_type: CallType = CallType.DIRECT
    confidence_score: float = 1.0
    line_number: int = 0

    @property
    def is_internal(self) -> bool:
        return self.callee_function_id is not None

    def ref(self) -> str:
        """Short human-readable reference for logs."""
        return f"{self.caller_function_id}->{self.callee_function_id or self.callee_name}"


@dataclass
class CallGraph:
    """Forward and reverse adjacency over internal call edges.

    Edges are directed: adjacency[A] contains B means A calls B. Neighbour
    lists are sorted and deduplicated; ``edge_count`` counts every internal
    call edge including repeats.
    """

    functions: dict[str, FunctionInfo] = field(default_factory=dict)
    adjacency: dict[str, list[str]] = field(default_factory=dict)
    reverse: dict[str, list[str]] = field(default_factory=dict)
    edges: list[CallEdge] = field(default_factory=list)
    external_edges: list[CallEdge] = field(default_factory=list)
    skipped_edges: list[CallEdge] = field(default_factory=list)
    edge_count: int = 0

    @property
    def all_nodes(self) -> set[str]:
        return set(self.functions)

    def sorted_nodes(self) -> list[str]:
        return sorted(self.functions)

    def callers_of(self, function_id: str) -> list[str]:
        return self.reverse.get(function_id, [])

    def callees_of(self, function_id: str) -> list[str]:
        return self.adjacency.get(function_id, [])
