"""JSON helpers for run snapshots (``e2eRunner.json``)."""
from __future__ import annotations

import json
from typing import Any

from .core import PathLike, atomic_write

_MISSING = object()


def read_json(path: PathLike, *, default: Any = _MISSING) -> Any:
    """Load a JSON document.

    A missing file returns ``default`` when one is given and raises
    ``FileNotFoundError`` otherwise.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        if default is _MISSING:
            raise
        return default


def write_json_atomic(path: PathLike, data: Any, *, indent: int = 2) -> None:
    """Atomically write ``data`` as sorted, indented JSON.

    Paths and other non-JSON values are written with ``str()``.
    """
    atomic_write(
        path,
        lambda fh: json.dump(data, fh, indent=indent, sort_keys=True, ensure_ascii=False, default=str),
    )


__all__ = ["read_json", "write_json_atomic"]
