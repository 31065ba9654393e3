"""Tests for graph/metrics.py - fan-in/fan-out, depth and hub classification."""

import pytest

from deadwood.config import MetricsOptions
from deadwood.graph import CallEdge, DependencyMetricsCalculator, FunctionInfo
from deadwood.graph.metrics import compute_depth_from_entry, compute_max_call_chain


def _by_id(metrics):
    return {m.function_id: m for m in metrics}


class TestCalculateMetrics:
    def test_fan_in_fan_out(self, chain_functions, chain_edges):
        metrics = _by_id(
            DependencyMetricsCalculator().calculate_metrics(
                chain_functions, chain_edges, {"entry"}, set()
            )
        )
        assert (metrics["entry"].fan_in, metrics["entry"].fan_out) == (0, 1)
        assert (metrics["a"].fan_in, metrics["a"].fan_out) == (1, 1)
        # external call is not counted
        assert metrics["b"].fan_out == 0

    def test_depth_and_chain(self, chain_functions, chain_edges):
        metrics = _by_id(
            DependencyMetricsCalculator().calculate_metrics(
                chain_functions, chain_edges, {"entry"}, set()
            )
        )
        assert [metrics[f].depth_from_entry for f in ("entry", "a", "b")] == [0, 1, 2]
        assert metrics["orphan"].depth_from_entry == -1
        assert [metrics[f].max_call_chain for f in ("entry", "a", "b")] == [2, 1, 0]

    def test_repeated_call_sites(self):
        functions = [FunctionInfo("a", "a", "x.py", 1, 2), FunctionInfo("b", "b", "x.py", 3, 4)]
        edges = [CallEdge("a", "b", "b", line_number=1), CallEdge("a", "b", "b", line_number=2)]
        metrics = _by_id(DependencyMetricsCalculator().calculate_metrics(functions, edges, (), ()))
        assert metrics["a"].fan_out == 1
        assert metrics["a"].total_calls == 2
        assert metrics["b"].total_callers == 2

    def test_cyclic_and_recursive(self):
        functions = [FunctionInfo(f, f, "x.py", 1, 2) for f in ("a", "b", "c")]
        edges = [CallEdge("a", "b", "b"), CallEdge("b", "a", "a"), CallEdge("c", "c", "c")]
        metrics = _by_id(
            DependencyMetricsCalculator().calculate_metrics(functions, edges, (), {"a", "b", "c"})
        )
        assert metrics["a"].is_cyclic and not metrics["a"].is_recursive
        assert metrics["c"].is_recursive

    def test_unknown_edges_ignored(self):
        functions = [FunctionInfo("a", "a", "x.py", 1, 2)]
        metrics = DependencyMetricsCalculator().calculate_metrics(
            functions, [CallEdge("a", "ghost", "ghost")], (), ()
        )
        assert metrics[0].fan_out == 0


class TestGraphHelpers:
    def test_depth_multi_source(self):
        adjacency = {"a": ["c"], "b": ["c"], "c": ["d"]}
        depth = compute_depth_from_entry(adjacency, {"a", "b"}, {"a", "b", "c", "d", "e"})
        assert depth == {"a": 0, "b": 0, "c": 1, "d": 2, "e": -1}

    def test_chain_counts_cycle_once(self):
        # a -> (b <-> c) -> d
        adjacency = {"a": ["b"], "b": ["c"], "c": ["b", "d"]}
        chain = compute_max_call_chain(adjacency, {"a", "b", "c", "d"})
        assert chain["d"] == 0
        assert chain["b"] == chain["c"] == 1
        assert chain["a"] == 2


class TestGenerateStats:
    def _metrics(self):
        functions = [FunctionInfo(f"f{i}", f"f{i}", "x.py", 1, 2) for i in range(8)]
        functions.append(FunctionInfo("lonely", "lonely", "y.py", 1, 2))
        functions.append(FunctionInfo("root", "root", "y.py", 3, 4))
        # f0 is called by f1..f6, f7 calls f1..f6
        edges = [CallEdge(f"f{i}", "f0", "f0") for i in range(1, 7)]
        edges += [CallEdge("f7", f"f{i}", f"f{i}") for i in range(1, 7)]
        return DependencyMetricsCalculator().calculate_metrics(functions, edges, {"root"}, ())

    def test_hubs_and_utilities(self):
        stats = DependencyMetricsCalculator().generate_stats(
            self._metrics(), MetricsOptions(hub_threshold=5, utility_threshold=5), {"root"}
        )
        assert [m.function_id for m in stats.hub_functions] == ["f0"]
        assert [m.function_id for m in stats.utility_functions] == ["f7"]

    def test_isolated_excludes_entry_points(self):
        stats = DependencyMetricsCalculator().generate_stats(self._metrics(), None, {"root"})
        assert [m.function_id for m in stats.isolated_functions] == ["lonely"]

    def test_aggregates(self):
        stats = DependencyMetricsCalculator().generate_stats(self._metrics())
        assert stats.total_functions == 10
        assert stats.max_fan_in == 6
        assert stats.max_fan_out == 6
        assert stats.avg_fan_in == pytest.approx(12 / 10)
        assert stats.avg_fan_out == pytest.approx(12 / 10)

    def test_caps_and_tie_order(self):
        functions = [FunctionInfo(f, f, "x.py", 1, 2) for f in ("c", "b", "a", "x")]
        edges = [CallEdge("x", f, f) for f in ("a", "b", "c")]
        calc = DependencyMetricsCalculator()
        metrics = calc.calculate_metrics(functions, edges, (), ())
        stats = calc.generate_stats(metrics, MetricsOptions(hub_threshold=1, max_hub_functions=2))
        assert [m.function_id for m in stats.hub_functions] == ["a", "b"]

    def test_empty(self):
        stats = DependencyMetricsCalculator().generate_stats([])
        assert stats.total_functions == 0
        assert stats.hub_functions == []
