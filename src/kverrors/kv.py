"""Key/value list helpers.

Attributes travel as flat, alternating ``key, value, key, value`` sequences.
Keys are expected to be strings; anything else is converted with ``str()``.
A trailing key without a value is dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def to_map(*keys_and_values: Any) -> dict[str, Any]:
    """Convert a flat key/value sequence into a dict (later keys win)."""
    result: dict[str, Any] = {}
    for i in range(0, len(keys_and_values) - 1, 2):
        key = keys_and_values[i]
        if not isinstance(key, str):
            key = str(key)
        result[key] = keys_and_values[i + 1]
    return result


def from_map(m: Mapping[str, Any]) -> list[Any]:
    """Flatten a mapping back into an alternating key/value list."""
    result: list[Any] = []
    for k, v in m.items():
        result.extend((k, v))
    return result


def combine(context: Mapping[str, Any], *keys_and_values: Any) -> dict[str, Any]:
    """Return a new dict holding `context` overlaid with the parsed pairs."""
    merged = dict(context)
    merged.update(to_map(*keys_and_values))
    return merged
