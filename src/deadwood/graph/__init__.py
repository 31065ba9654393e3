"""Call graph: models, entry points, reachability, cycles and metrics."""

from .builder import build_call_graph
from .entry_points import EntryPoint, EntryPointDetector, EntryReason, is_test_path
from .metrics import DependencyMetrics, DependencyMetricsCalculator, DependencyStats
from .models import CallEdge, CallGraph, CallType, FunctionInfo
from .reachability import (
    DeadCodeInfo,
    DeadCodeReason,
    ReachabilityResult,
    analyze_reachability,
    cyclic_function_ids,
    find_circular_dependencies,
    get_dead_code_info,
    reachable_from,
)

__all__ = [
    "CallEdge",
    "CallGraph",
    "CallType",
    "FunctionInfo",
    "build_call_graph",
    "EntryPoint",
    "EntryPointDetector",
    "EntryReason",
    "is_test_path",
    "DependencyMetrics",
    "DependencyMetricsCalculator",
    "DependencyStats",
    "DeadCodeInfo",
    "DeadCodeReason",
    "ReachabilityResult",
    "analyze_reachability",
    "cyclic_function_ids",
    "find_circular_dependencies",
    "get_dead_code_info",
    "reachable_from",
]
