"""Recommendation rules for classified cycles.

Rules are additive: every rule whose predicate holds contributes its
messages, in table order.
"""

from __future__ import annotations

from typing import Callable

from .models import ClassifiedCycle, CycleImportance, CycleType

Rule = tuple[Callable[[ClassifiedCycle], bool], tuple[str, ...]]

RULES: list[Rule] = [
    (
        lambda c: c.cross_layer,
        (
            "URGENT: Cross-layer cycle violates architectural boundaries",
            "Consider introducing interfaces or dependency injection",
            "Review layer separation and abstraction patterns",
        ),
    ),
    (
        lambda c: c.cross_module and not c.cross_layer,
        (
            "Cross-module cycle increases coupling",
            "Extract common functionality to shared module",
            "Consider using dependency injection or event patterns",
        ),
    ),
    (
        lambda c: c.cross_file and not c.cross_module and not c.cross_layer,
        ("Move the functions into one file or extract the shared logic",),
    ),
    (
        lambda c: c.importance is CycleImportance.CRITICAL,
        ("High priority: Architectural integrity at risk",),
    ),
    (
        lambda c: c.size > 5,
        ("Large cycle suggests design issues",),
    ),
    (
        lambda c: c.type is CycleType.COMPLEX,
        ("Break into smaller, focused components",),
    ),
    (
        lambda c: c.type is CycleType.MUTUAL and c.size == 2,
        ("Consider merging functions or introducing mediator pattern",),
    ),
    (
        lambda c: c.type is CycleType.RECURSIVE,
        ("Verify the recursion has a reachable base case",),
    ),
]


def recommend(cycle: ClassifiedCycle) -> list[str]:
    recommendations: list[str] = []
    for predicate, messages in RULES:
        if predicate(cycle):
            recommendations.extend(messages)
    return recommendations
