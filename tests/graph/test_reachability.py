"""Tests for graph/reachability.py - live set, dead code and cycles."""

from deadwood.config import CycleOptions
from deadwood.graph import (
    CallEdge,
    DeadCodeReason,
    FunctionInfo,
    analyze_reachability,
    cyclic_function_ids,
    find_circular_dependencies,
    get_dead_code_info,
    reachable_from,
)
from deadwood.graph.reachability import strongly_connected_components


class TestReachableFrom:
    def test_entries_reach_themselves(self):
        assert reachable_from({"a"}, []) == {"a"}

    def test_closure(self, chain_edges):
        assert reachable_from({"entry"}, chain_edges) == {"entry", "a", "b"}

    def test_external_edges_ignored(self, chain_edges):
        assert "print" not in reachable_from({"b"}, chain_edges)

    def test_cycle_terminates(self):
        edges = [CallEdge("a", "b", "b"), CallEdge("b", "a", "a")]
        assert reachable_from({"a"}, edges) == {"a", "b"}


class TestAnalyzeReachability:
    def test_partition(self, chain_functions, chain_edges):
        result = analyze_reachability(chain_functions, chain_edges, {"entry"})
        assert result.reachable == {"entry", "a", "b"}
        assert result.unreachable == {"orphan", "dead1", "dead2"}
        assert result.reachable | result.unreachable == {f.id for f in chain_functions}
        assert not result.reachable & result.unreachable

    def test_unknown_entry_ids_ignored(self, chain_functions, chain_edges):
        result = analyze_reachability(chain_functions, chain_edges, {"entry", "nope"})
        assert result.entry_points == {"entry"}

    def test_unused_exports(self, chain_functions, chain_edges):
        result = analyze_reachability(chain_functions, chain_edges, {"entry"})
        assert result.unused_exports == {"entry"}

    def test_no_entries_everything_dead(self, chain_functions, chain_edges):
        result = analyze_reachability(chain_functions, chain_edges, set())
        assert result.reachable == set()


class TestDeadCodeInfo:
    def test_reasons_and_order(self, chain_functions, chain_edges):
        result = analyze_reachability(chain_functions, chain_edges, {"entry"})
        info = get_dead_code_info(result.unreachable, chain_functions, chain_edges)
        assert [d.function_id for d in info] == ["orphan", "dead1", "dead2"]
        reasons = {d.function_id: d.reason for d in info}
        assert reasons["orphan"] is DeadCodeReason.NO_CALLERS
        assert reasons["dead2"] is DeadCodeReason.UNREACHABLE

    def test_test_only_callers(self):
        functions = [
            FunctionInfo("helper", "helper", "src/core/h.py", 1, 3),
            FunctionInfo("t", "test_helper", "tests/test_h.py", 1, 3),
        ]
        edges = [CallEdge("t", "helper", "helper")]
        info = get_dead_code_info({"helper"}, functions, edges)
        assert info[0].reason is DeadCodeReason.TEST_ONLY

    def test_filters(self, chain_functions, chain_edges):
        info = get_dead_code_info(
            {"orphan", "dead1"}, chain_functions, chain_edges, min_function_size=5
        )
        assert [d.function_id for d in info] == ["dead1"]

    def test_exclude_tests(self):
        functions = [FunctionInfo("t", "test_x", "tests/test_x.py", 1, 3)]
        assert get_dead_code_info({"t"}, functions, [], exclude_tests=True) == []


class TestCircularDependencies:
    def test_self_loop(self):
        result = find_circular_dependencies([CallEdge("a", "a", "a")])
        assert result.cycles == [["a"]]

    def test_rotation_deduplicated(self):
        edges = [CallEdge("b", "c", "c"), CallEdge("c", "a", "a"), CallEdge("a", "b", "b")]
        assert find_circular_dependencies(edges).cycles == [["a", "b", "c"]]

    def test_external_edges_excluded(self):
        assert find_circular_dependencies([CallEdge("a", None, "a")]).cycles == []

    def test_min_size(self):
        edges = [CallEdge("a", "a", "a"), CallEdge("b", "c", "c"), CallEdge("c", "b", "b")]
        result = find_circular_dependencies(edges, CycleOptions(min_size=2))
        assert result.cycles == [["b", "c"]]

    def test_cyclic_function_ids(self):
        edges = [
            CallEdge("a", "b", "b"),
            CallEdge("b", "a", "a"),
            CallEdge("c", "c", "c"),
            CallEdge("d", "a", "a"),
        ]
        assert cyclic_function_ids(edges) == {"a", "b", "c"}

    def test_components_include_singletons(self):
        components = strongly_connected_components([CallEdge("a", "b", "b")])
        assert sorted(len(c) for c in components) == [1, 1]
