"""Load an extracted snapshot from JSON.

A snapshot file holds the records produced by the upstream extraction pass:

    {
      "id": "snap-42",
      "functions": [{"id": "f1", "name": "main", "filePath": "src/cli/main.py",
                     "startLine": 1, "endLine": 12, "isExported": true}, ...],
      "callEdges": [{"callerFunctionId": "f1", "calleeFunctionId": "f2",
                     "calleeName": "run", "callType": "direct"}, ...],
      "typeDefinitions": [...],
      "typeMembers": [...],
      "methodOverrides": [...]
    }

Keys may be camelCase or snake_case. Unknown keys are ignored.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Union, get_type_hints

from .exceptions import SnapshotLoadError
from .graph.models import CallEdge, CallType, FunctionInfo
from .logging_config import get_logger
from .typesafety.models import MethodOverride, OverrideKind, TypeDefinition, TypeMember
from .typesafety.store import InMemoryTypeStore

logger = get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_SECTIONS = {
    "functions": ("functions",),
    "edges": ("call_edges", "edges"),
    "type_definitions": ("type_definitions",),
    "type_members": ("type_members",),
    "method_overrides": ("method_overrides",),
}

_ENUMS: dict[str, type[Enum]] = {"call_type": CallType, "override_kind": OverrideKind}


@dataclass
class Snapshot:
    id: str = ""
    functions: list[FunctionInfo] = field(default_factory=list)
    edges: list[CallEdge] = field(default_factory=list)
    type_definitions: list[TypeDefinition] = field(default_factory=list)
    type_members: list[TypeMember] = field(default_factory=list)
    method_overrides: list[MethodOverride] = field(default_factory=list)

    def type_store(self) -> InMemoryTypeStore:
        return InMemoryTypeStore(self.type_definitions, self.type_members, self.method_overrides)


def snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _record(cls: type, raw: Any, section: str, index: int, path: Path):
    if not isinstance(raw, dict):
        raise SnapshotLoadError(path, f"{section}[{index}] is not an object")

    hints = get_type_hints(cls)
    names = {f.name for f in fields(cls)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = snake_case(key)
        if name not in names:
            continue
        if name in _ENUMS and value is not None:
            try:
                value = _ENUMS[name](value)
            except ValueError as e:
                raise SnapshotLoadError(path, f"{section}[{index}]: {e}")
        elif isinstance(value, list) and str(hints[name]).startswith("tuple"):
            value = tuple(value)
        values[name] = value

    try:
        return cls(**values)
    except (TypeError, ValueError) as e:
        raise SnapshotLoadError(path, f"{section}[{index}]: {e}")


def _section(data: dict, name: str) -> list:
    for key in _SECTIONS[name]:
        for candidate in (key, re.sub(r"_([a-z])", lambda m: m.group(1).upper(), key)):
            if candidate in data:
                return data[candidate] or []
    return []


def load_snapshot(path: Union[str, Path]) -> Snapshot:
    """Read and validate a snapshot file.

    Raises:
        SnapshotLoadError: If the file is missing, not JSON, or a record is
            malformed
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SnapshotLoadError(path, str(e))
    except ValueError as e:
        raise SnapshotLoadError(path, f"invalid JSON: {e}")
    if not isinstance(data, dict):
        raise SnapshotLoadError(path, "top level must be an object")

    record_types = {
        "functions": FunctionInfo,
        "edges": CallEdge,
        "type_definitions": TypeDefinition,
        "type_members": TypeMember,
        "method_overrides": MethodOverride,
    }
    sections: dict[str, list] = {}
    for name, cls in record_types.items():
        raw = _section(data, name)
        if not isinstance(raw, list):
            raise SnapshotLoadError(path, f"'{name}' must be a list")
        sections[name] = [_record(cls, item, name, i, path) for i, item in enumerate(raw)]

    snapshot_id = data.get("id") or data.get("snapshot_id") or data.get("snapshotId") or ""
    snapshot = Snapshot(id=str(snapshot_id), **sections)
    logger.info(
        f"Loaded snapshot {snapshot.id or path.name}: {len(snapshot.functions)} function(s), "
        f"{len(snapshot.edges)} call edge(s)"
    )
    return snapshot
