"""Tests for deletion candidate selection."""

import pytest

from deadwood.config import DeletionOptions
from deadwood.deletion import DeletionCandidateGenerator
from deadwood.deletion.candidates import estimate_impact, is_anonymous, is_external_path
from deadwood.deletion.models import DeletionReason, Impact
from deadwood.graph.models import CallEdge, CallType, FunctionInfo
from deadwood.typesafety import InMemoryTypeStore, MethodOverride, OverrideKind


def _ids(candidates):
    return [c.function_id for c in candidates]


class FailingStore:
    def get_type_members(self, type_id):
        raise RuntimeError("store offline")

    def get_method_overrides_by_function(self, function_id):
        raise RuntimeError("store offline")

    def get_implementing_classes(self, interface_id):
        raise RuntimeError("store offline")


class TestCandidateReasons:
    def test_chain(self, chain_functions, chain_edges):
        generator = DeletionCandidateGenerator()
        candidates = generator.generate(chain_functions, chain_edges)

        assert _ids(candidates) == ["dead1", "orphan"]
        assert candidates[0].reason is DeletionReason.UNREACHABLE
        assert candidates[0].confidence_score == 1.0
        assert candidates[1].reason is DeletionReason.ISOLATED
        assert candidates[1].confidence_score == 0.95

    def test_dead_callee_with_strong_caller_is_skipped(self, chain_functions, chain_edges):
        generator = DeletionCandidateGenerator()
        candidates = generator.generate(chain_functions, chain_edges)
        assert "dead2" not in _ids(candidates)
        assert any("dead_two" in w for w in generator.warnings)

    def test_low_confidence_caller_does_not_keep_callee_alive(self, chain_functions):
        edges = [
            CallEdge("entry", "a", "step_a"),
            CallEdge("a", "b", "step_b", confidence_score=0.5),
        ]
        candidates = DeletionCandidateGenerator().generate(chain_functions, edges)
        by_id = {c.function_id: c for c in candidates}
        assert by_id["b"].reason is DeletionReason.NO_HIGH_CONFIDENCE_CALLERS
        assert by_id["b"].confidence_score == 0.90
        assert by_id["b"].callers_count == 1

    def test_confidence_threshold_is_configurable(self, chain_functions):
        edges = [
            CallEdge("entry", "a", "step_a"),
            CallEdge("a", "b", "step_b", confidence_score=0.5),
        ]
        options = DeletionOptions(confidence_threshold=0.4)
        candidates = DeletionCandidateGenerator(options).generate(chain_functions, edges)
        assert "b" not in _ids(candidates)

    def test_callback_registration_keeps_target_alive(self, chain_functions, chain_edges):
        edges = chain_edges + [
            CallEdge("entry", "orphan", "orphan", call_type=CallType.VIRTUAL, confidence_score=0.6)
        ]
        candidates = DeletionCandidateGenerator().generate(chain_functions, edges)
        assert "orphan" not in _ids(candidates)

    def test_self_recursion_does_not_keep_function_alive(self):
        functions = [
            FunctionInfo("main", "main", "src/app/main.py", 1, 3),
            FunctionInfo("walk", "walk", "src/app/tree.py", 1, 8),
        ]
        edges = [CallEdge("walk", "walk", "walk")]
        candidates = DeletionCandidateGenerator().generate(functions, edges)
        assert _ids(candidates) == ["walk"]
        assert candidates[0].reason is DeletionReason.UNREACHABLE

    def test_min_confidence_filter(self, chain_functions, chain_edges):
        options = DeletionOptions(candidate_min_confidence=0.96)
        candidates = DeletionCandidateGenerator(options).generate(chain_functions, chain_edges)
        assert _ids(candidates) == ["dead1"]


class TestExclusions:
    def _generate(self, functions, **options):
        return _ids(DeletionCandidateGenerator(DeletionOptions(**options)).generate(functions, []))

    def test_exports_kept_unless_included(self):
        functions = [
            FunctionInfo("main", "main", "src/app/main.py", 1, 3),
            FunctionInfo("api", "public_api", "src/app/lib.py", 1, 5, is_exported=True),
        ]
        assert self._generate(functions) == []
        assert self._generate(functions, include_exports=True) == ["api"]

    def test_exported_function_in_main_module_stays_live(self):
        functions = [FunctionInfo("idx", "setup", "src/app/index.ts", 1, 5, is_exported=True)]
        assert self._generate(functions, include_exports=True) == []

    def test_static_methods_kept_unless_included(self):
        functions = [
            FunctionInfo("s", "build", "src/app/factory.py", 1, 5, is_static=True, is_method=True)
        ]
        assert self._generate(functions) == []
        assert self._generate(functions, include_static_methods=True) == ["s"]

    def test_test_files_are_never_candidates(self):
        functions = [FunctionInfo("t", "helper", "tests/test_app.py", 1, 5)]
        assert self._generate(functions) == []
        assert self._generate(functions, exclude_tests=True) == []

    def test_external_and_anonymous_are_skipped(self):
        functions = [
            FunctionInfo("ext", "helper", "lib/site-packages/pkg/mod.py", 1, 5),
            FunctionInfo("stub", "helper", "src/app/types.pyi", 1, 2),
            FunctionInfo("lam", "<lambda>", "src/app/extra.py", 3, 3),
        ]
        assert self._generate(functions) == []

    def test_exclude_patterns(self):
        functions = [
            FunctionInfo("m", "upgrade", "src/app/migrations/0001.py", 1, 5),
            FunctionInfo("k", "keep_me", "src/app/extra.py", 1, 5),
        ]
        assert self._generate(functions, exclude_patterns=("*/migrations/*",)) == ["k"]


class TestTypeProtection:
    def test_type_contract_method_is_protected(self, chain_functions, chain_edges):
        store = InMemoryTypeStore(
            method_overrides=[
                MethodOverride(
                    "Extra.orphan",
                    "Extra",
                    "Base.orphan",
                    "Base",
                    OverrideKind.OVERRIDE,
                    function_id="orphan",
                )
            ]
        )
        generator = DeletionCandidateGenerator(store=store)
        candidates = generator.generate(chain_functions, chain_edges)

        assert _ids(candidates) == ["dead1"]
        assert [p.function_info.id for p in generator.protected] == ["orphan"]
        assert generator.protected[0].confidence_score == pytest.approx(0.70)
        assert candidates[0].type_info.confidence_score == 0.0

    def test_protection_threshold_is_configurable(self, chain_functions, chain_edges):
        store = InMemoryTypeStore(
            method_overrides=[
                MethodOverride(
                    "Extra.orphan",
                    "Extra",
                    "Base.orphan",
                    "Base",
                    OverrideKind.OVERRIDE,
                    function_id="orphan",
                )
            ]
        )
        options = DeletionOptions(protection_threshold=0.75)
        generator = DeletionCandidateGenerator(options, store)
        assert "orphan" in _ids(generator.generate(chain_functions, chain_edges))
        assert generator.protected == []

    def test_storage_failure_is_reported_and_unprotected(self, chain_functions, chain_edges):
        generator = DeletionCandidateGenerator(store=FailingStore())
        candidates = generator.generate(chain_functions, chain_edges)
        assert _ids(candidates) == ["dead1", "orphan"]
        assert all(c.type_info.storage_failed for c in candidates)
        assert sum("Type evidence unavailable" in w for w in generator.warnings) == 2


class TestHelpers:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("node_modules/lodash/index.js", True),
            ("app/vendor/lib.py", True),
            ("src/types.d.ts", True),
            ("src/app/builder.py", False),
            ("src/distance.py", False),
        ],
    )
    def test_is_external_path(self, path, expected):
        assert is_external_path(path) is expected

    @pytest.mark.parametrize(
        "name,expected",
        [("<lambda>", True), ("anonymous_3", True), ("arrow_12", True), ("arrow", False)],
    )
    def test_is_anonymous(self, name, expected):
        assert is_anonymous(name) is expected

    def test_estimate_impact(self):
        small = FunctionInfo("f", "f", "a.py", 1, 5)
        large = FunctionInfo("g", "g", "a.py", 1, 30)
        exported = FunctionInfo("h", "h", "a.py", 1, 5, is_exported=True)
        assert estimate_impact(small, 0) is Impact.LOW
        assert estimate_impact(small, 3) is Impact.MEDIUM
        assert estimate_impact(large, 0) is Impact.MEDIUM
        assert estimate_impact(small, 6) is Impact.HIGH
        assert estimate_impact(exported, 0) is Impact.HIGH
