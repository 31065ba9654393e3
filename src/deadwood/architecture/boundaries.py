"""File, module and layer boundaries derived from source paths.

Module: the first directory under the source root (``src/<module>/...``);
without a source root segment, the first directory of the path; files at
the top level belong to ``<root>``.

Layer: the first directory segment that matches the layer table below;
anything else is ``unknown``, which is treated as one more layer, so two
functions in unrecognised directories share a layer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from ..context import RunContext

ROOT_MODULE = "<root>"
UNKNOWN_LAYER = "unknown"

LAYER_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("cli", re.compile(r"^(cli|commands?)$")),
    ("core", re.compile(r"^(core|domain)$")),
    ("storage", re.compile(r"^(storage|database|db|persistence)$")),
    ("analyzers", re.compile(r"^(analy[sz]ers?|analysis)$")),
    ("utils", re.compile(r"^(utils?|utilities|helpers)$")),
    ("types", re.compile(r"^(types|interfaces|models)$")),
    ("services", re.compile(r"^services?$")),
    ("config", re.compile(r"^(config|configuration|settings)$")),
]


@dataclass(frozen=True)
class Scope:
    module: str
    layer: str


def _directory_parts(file_path: str) -> tuple[str, ...]:
    return PurePosixPath(file_path.replace("\\", "/")).parts[:-1]


def extract_module(file_path: str, source_root: str = "src") -> str:
    parts = [p for p in _directory_parts(file_path) if p not in ("/", ".")]
    if source_root in parts:
        after = parts[parts.index(source_root) + 1 :]
        return after[0] if after else ROOT_MODULE
    return parts[0] if parts else ROOT_MODULE


def extract_layer(file_path: str) -> str:
    for part in _directory_parts(file_path):
        lowered = part.lower()
        for layer, pattern in LAYER_PATTERNS:
            if pattern.match(lowered):
                return layer
    return UNKNOWN_LAYER


def resolve_scope(
    file_path: str, source_root: str = "src", context: Optional[RunContext] = None
) -> Scope:
    """Module and layer for a file, memoized in the run context when given."""
    if context is not None:
        cached = context.scope_cache.get(file_path)
        if cached is not None:
            return cached
    scope = Scope(module=extract_module(file_path, source_root), layer=extract_layer(file_path))
    if context is not None:
        context.scope_cache[file_path] = scope
    return scope
