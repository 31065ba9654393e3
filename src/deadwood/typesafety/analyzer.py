"""Type-aware deletion safety.

Scores how strongly the type system depends on a function: a method that
implements an abstract member, an interface member or overrides a parent
method can be dispatched to without any direct call edge, so a call graph
alone would wrongly call it dead.

Scoring (highest-priority category with compatible evidence wins):

    category              base   bonus per extra item         cap
    abstract_implement    0.80   +0.05 per abstract parent     0.95
    implement             0.80   +0.05 per implementing class  0.98
                                 +0.03 per interface
    override /            0.70   +0.05 per overridden member   0.90
    signature_implement

Each bonus counts items beyond the first and is bounded (0.20 for abstract
parents and overrides, 0.15 for classes, 0.10 for interfaces). A perfect
signature match adds up to +0.20 to the abstract and interface multipliers.
Rows with ``is_compatible=False`` are reported as evidence but never score,
and the classes behind an incompatible or signature-only interface add no
class bonus.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from ..context import RunContext
from ..exceptions import StorageQueryError
from ..graph.models import FunctionInfo
from ..logging_config import get_logger
from ..result import Result
from .models import (
    DeletionSafetyInfo,
    EvidenceStrength,
    MethodOverride,
    OverrideKind,
    SignatureCompatibility,
    TypeMember,
)
from .signature import check_signature
from .store import TypeStore

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_PROTECTION_THRESHOLD = 0.70

ABSTRACT_BASE, ABSTRACT_CAP = 0.80, 0.95
INTERFACE_BASE, INTERFACE_CAP = 0.80, 0.98
OVERRIDE_BASE, OVERRIDE_CAP = 0.70, 0.90


def _unique(items) -> list[str]:
    return sorted({i for i in items if i})


def _extra_bonus(count: int, step: float, limit: float) -> float:
    return min((count - 1) * step, limit) if count > 1 else 0.0


def _signature_bonus(signature: Optional[SignatureCompatibility]) -> float:
    if signature is None:
        return 0.0
    return max(0.0, (signature.compatibility_score - 0.5) * 0.4)


class TypeAwareDeletionSafety:
    """Protect type-contract methods from deletion.

    Args:
        store: Type relationship storage port
        context: Run context owning the lookup caches; pass the same one for
            every function in a run, a fresh one per run
    """

    def __init__(self, store: TypeStore, context: Optional[RunContext] = None):
        self.store = store
        self.context = context or RunContext()

    def analyze_deletion_safety(
        self, function: FunctionInfo, snapshot_id: str = ""
    ) -> DeletionSafetyInfo:
        overrides = self.fetch_overrides(function.id, snapshot_id)
        if not overrides.ok:
            return self._fail_open(function, overrides.error)

        rows = overrides.value
        interface_rows = [r for r in rows if r.override_kind is OverrideKind.IMPLEMENT]
        signature_rows = [r for r in rows if r.override_kind is OverrideKind.SIGNATURE_IMPLEMENT]
        abstract_rows = [r for r in rows if r.override_kind is OverrideKind.ABSTRACT_IMPLEMENT]
        override_rows = [r for r in rows if r.override_kind is OverrideKind.OVERRIDE]

        interfaces = _unique(r.target_type_id for r in interface_rows + signature_rows)
        abstract_parents = _unique(r.target_member_id for r in abstract_rows)
        classes_by_interface: dict[str, list[str]] = {}
        for interface_id in interfaces:
            classes = self.fetch_implementing_classes(interface_id)
            if not classes.ok:
                return self._fail_open(function, classes.error)
            classes_by_interface[interface_id] = classes.value
        implementing = _unique(c for names in classes_by_interface.values() for c in names)
        # Only compatible nominal implementations feed the class bonus
        scoring_classes = _unique(
            c
            for r in interface_rows
            if r.is_compatible
            for c in classes_by_interface.get(r.target_type_id, [])
        )

        signature = None
        contract_rows = [
            r for r in abstract_rows + interface_rows + signature_rows if r.is_compatible
        ]
        if contract_rows:
            checked = self._best_signature(function, contract_rows, snapshot_id)
            if not checked.ok:
                return self._fail_open(function, checked.error)
            signature = checked.value

        info = DeletionSafetyInfo(
            implemented_interfaces=interfaces,
            implementing_classes=implementing,
            overridden_methods=_unique(r.target_member_id for r in override_rows),
            abstract_methods=abstract_parents,
            is_interface_implementation=bool(interfaces),
            is_method_override=bool(override_rows),
            is_abstract_implementation=bool(abstract_rows),
            evidence_strength=EvidenceStrength(
                interface_count=len(interfaces),
                class_count=len(implementing),
                abstract_implementation_count=len(abstract_parents),
                override_count=len(_unique(r.target_member_id for r in override_rows)),
                incompatible_count=sum(1 for r in rows if not r.is_compatible),
            ),
            signature_compatibility=signature,
        )
        info.confidence_score, info.protection_reason = self._score(
            abstract_rows,
            interface_rows,
            signature_rows,
            override_rows,
            scoring_classes,
            signature,
        )
        logger.debug(
            f"Deletion safety for {function.name}: {info.confidence_score:.2f} "
            f"({info.protection_reason or 'no type evidence'})"
        )
        return info

    def should_protect_from_deletion(
        self,
        function: FunctionInfo,
        snapshot_id: str = "",
        threshold: float = DEFAULT_PROTECTION_THRESHOLD,
    ) -> bool:
        info = self.analyze_deletion_safety(function, snapshot_id)
        return info.confidence_score >= threshold

    def get_protection_reason(self, function: FunctionInfo, snapshot_id: str = "") -> Optional[str]:
        return self.analyze_deletion_safety(function, snapshot_id).protection_reason

    # ── storage lookups ───────────────────────────────────────────────

    def fetch_overrides(
        self, function_id: str, snapshot_id: str = ""
    ) -> Result[list[MethodOverride]]:
        cached = self.context.override_cache.get(function_id)
        if cached is None:
            fetched = self._query(
                "get_method_overrides_by_function",
                function_id,
                self.store.get_method_overrides_by_function,
            )
            if not fetched.ok:
                return fetched
            cached = list(fetched.value)
            self.context.override_cache[function_id] = cached
        rows = [
            r
            for r in cached
            if not r.snapshot_id or not snapshot_id or r.snapshot_id == snapshot_id
        ]
        return Result.success(rows, produced_by="get_method_overrides_by_function")

    def fetch_implementing_classes(self, interface_id: str) -> Result[list[str]]:
        cached = self.context.implementing_cache.get(interface_id)
        if cached is not None:
            return Result.success(cached, produced_by="get_implementing_classes")
        fetched = self._query(
            "get_implementing_classes", interface_id, self.store.get_implementing_classes
        )
        if not fetched.ok:
            return Result.failure(fetched.error, produced_by=fetched.produced_by)
        names = _unique(t.name for t in fetched.value)
        self.context.implementing_cache[interface_id] = names
        return Result.success(names, produced_by="get_implementing_classes")

    def _best_signature(
        self, function: FunctionInfo, rows: list[MethodOverride], snapshot_id: str
    ) -> Result[Optional[SignatureCompatibility]]:
        best: Optional[SignatureCompatibility] = None
        for row in rows:
            if not row.target_type_id:
                continue
            members = self._query(
                "get_type_members", row.target_type_id, self.store.get_type_members
            )
            if not members.ok:
                return Result.failure(members.error, produced_by=members.produced_by)
            target = self._find_member(members.value, row.target_member_id, snapshot_id)
            result = check_signature(function, target)
            if best is None or result.compatibility_score > best.compatibility_score:
                best = result
        return Result.success(best, produced_by="get_type_members")

    @staticmethod
    def _find_member(
        members: list[TypeMember], member_id: Optional[str], snapshot_id: str
    ) -> Optional[TypeMember]:
        for member in members:
            if member.id == member_id and (
                not snapshot_id or not member.snapshot_id or member.snapshot_id == snapshot_id
            ):
                return member
        return None

    @staticmethod
    def _query(name: str, key: str, call: Callable[[str], T]) -> Result[T]:
        try:
            return Result.success(call(key), produced_by=name)
        except Exception as e:
            return Result.failure(StorageQueryError(name, key, str(e)), produced_by=name)

    @staticmethod
    def _fail_open(function: FunctionInfo, error) -> DeletionSafetyInfo:
        logger.warning(
            f"Type evidence unavailable for {function.name} ({function.id}); "
            f"treating as unprotected: {error}"
        )
        return DeletionSafetyInfo(confidence_score=0.0, protection_reason=None, storage_failed=True)

    # ── scoring ───────────────────────────────────────────────────────

    @staticmethod
    def _score(
        abstract_rows: list[MethodOverride],
        interface_rows: list[MethodOverride],
        signature_rows: list[MethodOverride],
        override_rows: list[MethodOverride],
        scoring_classes: list[str],
        signature: Optional[SignatureCompatibility],
    ) -> tuple[float, Optional[str]]:
        def compatible(rows: list[MethodOverride]) -> list[MethodOverride]:
            return [r for r in rows if r.is_compatible]

        def incompatible_note(rows: list[MethodOverride]) -> str:
            n = sum(1 for r in rows if not r.is_compatible)
            return f"; {n} incompatible match(es) not counted" if n else ""

        abstract_ok = compatible(abstract_rows)
        if abstract_ok:
            count = len(_unique(r.target_member_id for r in abstract_ok)) or len(abstract_ok)
            multiplier = 1.0 + _extra_bonus(count, 0.05, 0.20) + _signature_bonus(signature)
            score = min(ABSTRACT_BASE * multiplier, ABSTRACT_CAP)
            reason = f"Implements {count} abstract base method(s)"
            return round(score, 4), reason + incompatible_note(abstract_rows)

        interface_ok = compatible(interface_rows)
        if interface_ok:
            interfaces = len(_unique(r.target_type_id for r in interface_ok)) or len(interface_ok)
            classes = len(scoring_classes)
            multiplier = (
                1.0
                + _signature_bonus(signature)
                + _extra_bonus(classes, 0.05, 0.15)
                + _extra_bonus(interfaces, 0.03, 0.10)
            )
            score = min(INTERFACE_BASE * multiplier, INTERFACE_CAP)
            reason = f"Implements {interfaces} interface(s)"
            if classes:
                reason += f", shared by {classes} class(es)"
            if signature is not None and not signature.is_compatible:
                reason += f" (signature compatibility issues: {', '.join(signature.issues)})"
            return round(score, 4), reason + incompatible_note(interface_rows)

        override_ok = compatible(override_rows)
        structural_ok = compatible(signature_rows)
        if override_ok or structural_ok:
            count = len(_unique(r.target_member_id for r in override_ok + structural_ok)) or len(
                override_ok + structural_ok
            )
            score = min(OVERRIDE_BASE * (1.0 + _extra_bonus(count, 0.05, 0.20)), OVERRIDE_CAP)
            parts = []
            if override_ok:
                parts.append(f"Overrides {len(override_ok)} parent method(s)")
            if structural_ok:
                parts.append(f"Structurally implements {len(structural_ok)} interface method(s)")
            reason = ", ".join(parts) + incompatible_note(override_rows + signature_rows)
            return round(score, 4), reason

        return 0.0, None
