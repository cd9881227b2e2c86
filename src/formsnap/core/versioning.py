"""Dotted numeric schema versions.

Versions such as ``"1.10.0"`` are ordered segment by segment as integers,
with missing trailing segments read as ``0`` (so ``"1.2" == "1.2.0"``).
Lexical string order would put ``"1.10.0"`` before ``"1.2.0"``; nothing in
the engine sorts versions as strings.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key


def _segments(version: str) -> list[int]:
    parts: list[int] = []
    for raw in version.strip().split("."):
        try:
            parts.append(int(raw))
        except ValueError as exc:
            raise ValueError(f"Invalid version segment {raw!r} in {version!r}") from exc
    return parts


def compare_versions(v1: str, v2: str) -> int:
    """Return a negative, zero or positive int as `v1` is below, equal or above `v2`."""
    a, b = _segments(v1), _segments(v2)
    for i in range(max(len(a), len(b))):
        x = a[i] if i < len(a) else 0
        y = b[i] if i < len(b) else 0
        if x != y:
            return x - y
    return 0


version_key = cmp_to_key(compare_versions)


def sort_versions(versions: Iterable[str], *, reverse: bool = False) -> list[str]:
    """Return `versions` sorted numerically (stable for equal versions)."""
    return sorted(versions, key=version_key, reverse=reverse)


def unique_sorted_versions(versions: Iterable[str]) -> list[str]:
    """Deduplicate by string value, then sort numerically."""
    return sort_versions(dict.fromkeys(versions))


__all__ = ["compare_versions", "sort_versions", "unique_sorted_versions", "version_key"]
