"""JSON merge patch (RFC 7386) helpers.

A merge patch only carries the fields that differ between two documents. A
`None` value in a patch removes the field from the target.
"""

from collections.abc import Iterable
from typing import Any, TypeVar

__all__ = [
    "create_merge_patch",
    "apply_merge_patch",
]

T = TypeVar("T")


def _unique_keys(k1: dict[T, Any], k2: dict[T, Any]) -> Iterable[T]:
    """Return an ordered set."""
    return {
        **{k: True for k in k1.keys()},
        **{k: True for k in k2.keys()},
    }.keys()


def create_merge_patch(base: dict[str, Any], new: dict[str, Any]) -> dict[str, Any]:
    """Return the merge patch that turns `base` into `new`."""
    patch: dict[str, Any] = {}
    for key in _unique_keys(base, new):
        if key not in new:
            patch[key] = None
            continue
        new_value = new[key]
        if key not in base:
            patch[key] = new_value
            continue
        base_value = base[key]
        if isinstance(base_value, dict) and isinstance(new_value, dict):
            if child := create_merge_patch(base_value, new_value):
                patch[key] = child
        elif base_value != new_value:
            patch[key] = new_value
    return patch


def apply_merge_patch(target: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of `target` with the merge patch applied. Lists are replaced."""
    result = target.copy()
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict):
            current = result.get(key)
            result[key] = apply_merge_patch(
                current if isinstance(current, dict) else {}, value
            )
        else:
            result[key] = value
    return result
