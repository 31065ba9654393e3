"""Architectural boundaries (module, layer) of source files."""

from .boundaries import (
    ROOT_MODULE,
    UNKNOWN_LAYER,
    Scope,
    extract_layer,
    extract_module,
    resolve_scope,
)

__all__ = [
    "ROOT_MODULE",
    "UNKNOWN_LAYER",
    "Scope",
    "extract_layer",
    "extract_module",
    "resolve_scope",
]
