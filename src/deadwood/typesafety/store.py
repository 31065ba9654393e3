"""Storage port for type relationship facts, plus an in-memory implementation."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Protocol

from .models import MethodOverride, OverrideKind, TypeDefinition, TypeMember


class TypeStore(Protocol):
    """Read-only queries the deletion-safety analyzer needs.

    Any method may raise; callers treat that as a storage query failure.
    """

    def get_type_members(self, type_id: str) -> list[TypeMember]: ...

    def get_method_overrides_by_function(self, function_id: str) -> list[MethodOverride]: ...

    def get_implementing_classes(self, interface_id: str) -> list[TypeDefinition]: ...


class InMemoryTypeStore:
    """TypeStore over records already loaded into memory.

    Overrides are attached to a function either directly through
    ``MethodOverride.function_id`` or through the ``TypeMember`` whose id is
    the override's ``method_member_id``.
    """

    def __init__(
        self,
        type_definitions: Iterable[TypeDefinition] = (),
        type_members: Iterable[TypeMember] = (),
        method_overrides: Iterable[MethodOverride] = (),
    ):
        self._types = {t.id: t for t in type_definitions}
        self._members_by_type: dict[str, list[TypeMember]] = defaultdict(list)
        member_function: dict[str, str] = {}
        for member in type_members:
            self._members_by_type[member.type_id].append(member)
            if member.function_id:
                member_function[member.id] = member.function_id

        self._overrides_by_function: dict[str, list[MethodOverride]] = defaultdict(list)
        self._implementors: dict[str, set[str]] = defaultdict(set)
        for override in method_overrides:
            function_id = override.function_id or member_function.get(override.method_member_id)
            if function_id:
                self._overrides_by_function[function_id].append(override)
            if override.target_type_id and override.override_kind in (
                OverrideKind.IMPLEMENT,
                OverrideKind.SIGNATURE_IMPLEMENT,
            ):
                self._implementors[override.target_type_id].add(override.source_type_id)

    def get_type_members(self, type_id: str) -> list[TypeMember]:
        return list(self._members_by_type.get(type_id, []))

    def get_method_overrides_by_function(self, function_id: str) -> list[MethodOverride]:
        return list(self._overrides_by_function.get(function_id, []))

    def get_implementing_classes(self, interface_id: str) -> list[TypeDefinition]:
        return [
            self._types.get(type_id, TypeDefinition(id=type_id, name=type_id))
            for type_id in sorted(self._implementors.get(interface_id, ()))
        ]
