"""Type relationship facts and deletion-safety results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OverrideKind(Enum):
    """How a method relates to a member of another type.

    Set upstream by the class-hierarchy pass; never re-derived here.
    """

    OVERRIDE = "override"
    IMPLEMENT = "implement"
    ABSTRACT_IMPLEMENT = "abstract_implement"
    SIGNATURE_IMPLEMENT = "signature_implement"


@dataclass(frozen=True)
class TypeDefinition:
    id: str
    name: str
    kind: str = "class"
    file_path: str = ""
    snapshot_id: str = ""


@dataclass(frozen=True)
class TypeMember:
    id: str
    type_id: str
    name: str
    member_kind: str = "method"
    type_text: str = ""
    function_id: Optional[str] = None
    snapshot_id: str = ""


@dataclass(frozen=True)
class MethodOverride:
    method_member_id: str
    source_type_id: str
    target_member_id: Optional[str]
    target_type_id: Optional[str]
    override_kind: OverrideKind
    is_compatible: bool = True
    confidence_score: float = 1.0
    function_id: Optional[str] = None
    snapshot_id: str = ""


@dataclass(frozen=True)
class SignatureCompatibility:
    is_compatible: bool
    compatibility_score: float
    issues: tuple[str, ...] = ()
    parameter_count: int = 0
    return_type_match: bool = True
    parameter_types_match: bool = True


@dataclass
class EvidenceStrength:
    interface_count: int = 0
    class_count: int = 0
    abstract_implementation_count: int = 0
    override_count: int = 0
    incompatible_count: int = 0


@dataclass
class DeletionSafetyInfo:
    """Why (and how strongly) a function must not be deleted.

    ``storage_failed`` marks a fail-open result: the evidence could not be
    fetched, so ``confidence_score`` is 0 for lack of data, not because the
    function is known to be unconstrained.
    """

    confidence_score: float = 0.0
    protection_reason: Optional[str] = None
    implemented_interfaces: list[str] = field(default_factory=list)
    implementing_classes: list[str] = field(default_factory=list)
    overridden_methods: list[str] = field(default_factory=list)
    abstract_methods: list[str] = field(default_factory=list)
    is_interface_implementation: bool = False
    is_method_override: bool = False
    is_abstract_implementation: bool = False
    evidence_strength: EvidenceStrength = field(default_factory=EvidenceStrength)
    signature_compatibility: Optional[SignatureCompatibility] = None
    storage_failed: bool = False
