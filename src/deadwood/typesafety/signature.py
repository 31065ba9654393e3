"""Lightweight signature compatibility between an implementation and its contract.

Signatures are compared textually: parameter counts, a handful of primitive
type keywords, and the declared return type. This is a plausibility check
on facts the extractor already resolved, not type inference.
"""

from __future__ import annotations

import re
from typing import Optional

from ..graph.models import FunctionInfo
from .models import SignatureCompatibility, TypeMember

COMPATIBLE_AT = 0.7

_TYPE_KEYWORDS = re.compile(
    r"\b(string|number|boolean|object|void|any|unknown|str|int|float|bool|bytes|None|dict|list)\b"
)
_RECEIVERS = {"self", "cls"}
_ANY_TYPES = {"any", "Any", "unknown", "object"}
_EQUIVALENT = [{"void", "undefined", "None"}]
_OPEN = "([{<"
_CLOSE = ")]}>"


def _strip_arrows(signature: str) -> str:
    # Arrows would otherwise read as closing angle brackets
    return signature.replace("=>", "~~").replace("->", "~~")


def split_parameters(signature: str) -> list[str]:
    """Top-level comma split of the outermost parameter list."""
    text = _strip_arrows(signature)
    start = text.find("(")
    if start == -1:
        return []

    # Scan the arrow-free text, collect characters from the original
    params: list[str] = []
    depth = 0
    current = ""
    for i in range(start + 1, len(text)):
        ch = text[i]
        if ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            if depth == 0:
                break
            depth -= 1
        if ch == "," and depth == 0:
            params.append(current.strip())
            current = ""
        else:
            current += signature[i]
    if current.strip():
        params.append(current.strip())
    return [p for p in params if p and p.split(":")[0].strip() not in _RECEIVERS]


def parameter_count(fn: FunctionInfo) -> int:
    if fn.parameters:
        return len([p for p in fn.parameters if p not in _RECEIVERS])
    if fn.signature:
        return len(split_parameters(fn.signature))
    return 0


def extract_return_type(signature: str) -> Optional[str]:
    """Declared return type after the parameter list, if any.

    Understands ``(...) -> T``, ``(...) => T`` and ``(...): T``.
    """
    text = signature.strip()
    close = text.rfind(")")
    for arrow in ("->", "=>"):
        idx = text.rfind(arrow)
        if idx > close:
            value = text[idx + 2 :].strip().rstrip(":{;").strip()
            return value or None
    if close != -1:
        tail = text[close + 1 :].strip()
        if tail.startswith(":"):
            value = tail[1:].strip().rstrip("{;").strip()
            return value or None
    return None


def type_keywords(signature: str) -> set[str]:
    return set(_TYPE_KEYWORDS.findall(signature))


def return_types_compatible(impl: str, target: str) -> bool:
    if impl == target or impl in _ANY_TYPES or target in _ANY_TYPES:
        return True
    return any(impl in group and target in group for group in _EQUIVALENT)


def _parameter_count_penalty(impl_count: int, target_count: int) -> tuple[bool, float]:
    if impl_count == target_count:
        return True, 1.0
    if impl_count < target_count:
        # Missing trailing parameters are usually optional ones
        diff = target_count - impl_count
        return diff <= 2, max(0.8, 1.0 - diff * 0.1)
    diff = impl_count - target_count
    return diff <= 1, max(0.6, 1.0 - diff * 0.2)


def check_signature(fn: FunctionInfo, target: Optional[TypeMember]) -> SignatureCompatibility:
    """Compare ``fn`` against the contract member it implements."""
    if target is None:
        return SignatureCompatibility(
            is_compatible=False,
            compatibility_score=0.0,
            issues=("Target method signature not found",),
            return_type_match=False,
            parameter_types_match=False,
        )

    issues: list[str] = []
    score = 1.0
    impl_signature = fn.signature
    target_signature = target.type_text

    impl_count = parameter_count(fn)
    target_count = len(split_parameters(target_signature))
    count_ok, _ = _parameter_count_penalty(impl_count, target_count)
    if not count_ok:
        issues.append(
            f"Parameter count mismatch: implementation has {impl_count}, "
            f"contract expects {target_count}"
        )
        score *= 0.7

    types_ok = True
    if impl_signature and target_signature:
        target_keywords = type_keywords(target_signature)
        common = type_keywords(impl_signature) & target_keywords
        if target_keywords and len(common) / len(target_keywords) < 0.5:
            types_ok = False
            issues.append("Parameter types appear incompatible based on signature analysis")
            score *= 0.8

    return_ok = True
    impl_return = fn.return_type or extract_return_type(impl_signature)
    target_return = extract_return_type(target_signature) if target_signature else None
    if impl_return and target_return and not return_types_compatible(impl_return, target_return):
        return_ok = False
        issues.append(
            f"Return type mismatch: implementation returns '{impl_return}', "
            f"contract expects '{target_return}'"
        )
        score *= 0.9

    return SignatureCompatibility(
        is_compatible=not issues or score >= COMPATIBLE_AT,
        compatibility_score=round(score, 4),
        issues=tuple(issues),
        parameter_count=impl_count,
        return_type_match=return_ok,
        parameter_types_match=types_ok,
    )
