"""Cycle classification: type, boundary crossing, severity and advice."""

from .analyzer import EnhancedCycleAnalyzer, cycle_id, importance_for, score_cycle
from .models import (
    ClassifiedCycle,
    CycleImportance,
    CyclesAnalysisResult,
    CycleType,
    FilterStats,
)
from .recommendations import recommend

__all__ = [
    "EnhancedCycleAnalyzer",
    "ClassifiedCycle",
    "CycleImportance",
    "CyclesAnalysisResult",
    "CycleType",
    "FilterStats",
    "cycle_id",
    "importance_for",
    "recommend",
    "score_cycle",
]
