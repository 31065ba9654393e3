"""Type-aware deletion safety: protect methods bound by type contracts."""

from .analyzer import DEFAULT_PROTECTION_THRESHOLD, TypeAwareDeletionSafety
from .models import (
    DeletionSafetyInfo,
    EvidenceStrength,
    MethodOverride,
    OverrideKind,
    SignatureCompatibility,
    TypeDefinition,
    TypeMember,
)
from .signature import check_signature
from .store import InMemoryTypeStore, TypeStore

__all__ = [
    "DEFAULT_PROTECTION_THRESHOLD",
    "TypeAwareDeletionSafety",
    "DeletionSafetyInfo",
    "EvidenceStrength",
    "MethodOverride",
    "OverrideKind",
    "SignatureCompatibility",
    "TypeDefinition",
    "TypeMember",
    "check_signature",
    "InMemoryTypeStore",
    "TypeStore",
]
