"""Recursive mapping merge used for config layers and runner cache data."""
from __future__ import annotations

from typing import Any, Dict, Mapping


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Return ``base`` updated with ``override``; neither input is mutated.

    Nested mappings merge key by key. Any other value, lists included,
    replaces what ``base`` held.

    >>> deep_merge({"ports": {"host": "", "max_port": 65535}}, {"ports": {"host": "127.0.0.1"}})
    {'ports': {'host': '127.0.0.1', 'max_port': 65535}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


__all__ = ["deep_merge"]
