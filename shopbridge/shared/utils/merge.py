"""Recursive merge for nested option mappings (headers, params, form data)."""

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any] | None, override: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested mappings present on both sides are merged key by key. Any other
    value in ``override`` (lists, tuples, scalars) replaces the base value.
    Neither input is modified.

    Args:
        base: Base mapping; None is treated as empty.
        override: Mapping whose values win; None is treated as empty.

    Returns:
        A new dict.
    """
    result: dict[str, Any] = dict(base or {})
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            result[key] = deep_merge({}, value)
        else:
            result[key] = value
    return result
