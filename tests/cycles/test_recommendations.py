"""Tests for cycles/recommendations.py - additive advice rules."""

from deadwood.cycles import ClassifiedCycle, CycleImportance, CycleType, recommend


def _cycle(nodes, importance, cross_file=False, cross_module=False, cross_layer=False):
    return ClassifiedCycle(
        id="cyc_test",
        nodes=nodes,
        type=CycleType.for_length(len(nodes)),
        importance=importance,
        score=0.0,
        cross_file=cross_file,
        cross_module=cross_module,
        cross_layer=cross_layer,
        file_count=1,
        module_count=1,
        layer_count=1,
        cyclomatic_complexity=len(nodes),
        average_complexity=1.0,
    )


class TestRecommend:
    def test_cross_file_pair(self):
        recs = recommend(_cycle(["a", "b"], CycleImportance.MEDIUM, cross_file=True))
        assert recs == [
            "Move the functions into one file or extract the shared logic",
            "Consider merging functions or introducing mediator pattern",
        ]

    def test_cross_module_triple(self):
        recs = recommend(
            _cycle(["a", "b", "c"], CycleImportance.HIGH, cross_file=True, cross_module=True)
        )
        assert recs[0] == "Cross-module cycle increases coupling"
        assert len(recs) == 3

    def test_large_cross_layer_cycle(self):
        cycle = _cycle(
            list("abcdef"),
            CycleImportance.CRITICAL,
            cross_file=True,
            cross_module=True,
            cross_layer=True,
        )
        recs = recommend(cycle)
        assert recs[:3] == [
            "URGENT: Cross-layer cycle violates architectural boundaries",
            "Consider introducing interfaces or dependency injection",
            "Review layer separation and abstraction patterns",
        ]
        assert "High priority: Architectural integrity at risk" in recs
        assert "Large cycle suggests design issues" in recs
        assert "Break into smaller, focused components" in recs
        assert "Cross-module cycle increases coupling" not in recs

    def test_local_recursion(self):
        assert recommend(_cycle(["a"], CycleImportance.LOW)) == [
            "Verify the recursion has a reachable base case"
        ]

    def test_cycle_type_for_length(self):
        assert CycleType.for_length(1) is CycleType.RECURSIVE
        assert CycleType.for_length(3) is CycleType.MUTUAL
        assert CycleType.for_length(4) is CycleType.COMPLEX
