"""Data models for classified call cycles."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CycleType(Enum):
    RECURSIVE = "RECURSIVE"  # one function calling itself
    MUTUAL = "MUTUAL"  # two or three functions
    COMPLEX = "COMPLEX"  # four or more

    @classmethod
    def for_length(cls, length: int) -> "CycleType":
        if length == 1:
            return cls.RECURSIVE
        if length <= 3:
            return cls.MUTUAL
        return cls.COMPLEX


class CycleImportance(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def base_score(self) -> float:
        return _BASE_SCORES[self]


_BASE_SCORES = {
    CycleImportance.CRITICAL: 8.0,
    CycleImportance.HIGH: 6.0,
    CycleImportance.MEDIUM: 4.0,
    CycleImportance.LOW: 2.0,
}


@dataclass
class ClassifiedCycle:
    """A simple call cycle with boundary analysis, score and advice.

    ``nodes`` is the canonical rotation (smallest id first); the edge from
    the last node back to the first is implied.
    """

    id: str
    nodes: list[str]
    type: CycleType
    importance: CycleImportance
    score: float
    cross_file: bool
    cross_module: bool
    cross_layer: bool
    file_count: int
    module_count: int
    layer_count: int
    cyclomatic_complexity: int
    average_complexity: float
    recommendations: list[str] = field(default_factory=list)
    node_names: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    modules: list[str] = field(default_factory=list)
    layers: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.nodes)


@dataclass
class FilterStats:
    """How many cycles each filter removed, in application order."""

    exclude_recursive: int = 0
    recursive_only: int = 0
    exclude_clear: int = 0
    min_complexity: int = 0
    cross_layer_only: int = 0
    cross_module_only: int = 0

    @property
    def total_excluded(self) -> int:
        return (
            self.exclude_recursive
            + self.recursive_only
            + self.exclude_clear
            + self.min_complexity
            + self.cross_layer_only
            + self.cross_module_only
        )


@dataclass
class CyclesAnalysisResult:
    classified_cycles: list[ClassifiedCycle] = field(default_factory=list)
    total_cycles: int = 0
    filtered_cycles: int = 0
    filter_stats: FilterStats = field(default_factory=FilterStats)
    importance_summary: dict[str, int] = field(default_factory=dict)
    truncated: bool = False
