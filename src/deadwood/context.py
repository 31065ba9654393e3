"""Per-run analysis context.

Owns every memo cache used during one analysis or deletion run. A fresh
context is created per run so nothing leaks between runs or threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .architecture.boundaries import Scope
    from .typesafety.models import MethodOverride


@dataclass
class RunContext:
    """Caches scoped to a single run.

    Attributes:
        snapshot_id: Snapshot whose type facts are being consulted
        scope_cache: file path -> (module, layer)
        override_cache: function id -> override rows for that function
        implementing_cache: interface type id -> implementing class names
    """

    snapshot_id: str = ""
    scope_cache: dict[str, "Scope"] = field(default_factory=dict)
    override_cache: dict[str, list["MethodOverride"]] = field(default_factory=dict)
    implementing_cache: dict[str, list[str]] = field(default_factory=dict)

    def clear(self) -> None:
        self.scope_cache.clear()
        self.override_cache.clear()
        self.implementing_cache.clear()
