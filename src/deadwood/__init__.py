"""
deadwood - call-graph dead code analysis and safe removal

Finds functions no entry point can reach, classifies circular call
dependencies by how badly they cross architectural boundaries, and removes
dead functions in validated, reversible batches while protecting anything
that satisfies a type contract (interface, abstract method, override).
"""

__version__ = "0.1.0"
__author__ = "Naman Agarwal"

from .config import CycleOptions, DeadwoodConfig, DeletionOptions, MetricsOptions, load_config
from .context import RunContext
from .graph.models import CallEdge, CallGraph, CallType, FunctionInfo
from .result import Result

__all__ = [
    "CallEdge",
    "CallGraph",
    "CallType",
    "CycleOptions",
    "DeadwoodConfig",
    "DeletionOptions",
    "FunctionInfo",
    "MetricsOptions",
    "Result",
    "RunContext",
    "load_config",
]
