"""YAML helpers for config layers and the lifecycle store."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any

import yaml

from .core import PathLike, atomic_write


def read_yaml(path: PathLike, default: Any = None, raise_on_error: bool = False) -> Any:
    """Parse the YAML document at ``path``.

    An empty document yields ``default``. A missing or unparsable file also
    yields ``default`` unless ``raise_on_error`` is set, in which case the
    ``FileNotFoundError``, ``UnicodeDecodeError`` or ``yaml.YAMLError``
    propagates.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_SH)
            try:
                data = yaml.safe_load(fh)
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def write_yaml(path: PathLike, data: Any) -> None:
    """Atomically write ``data`` as block-style YAML with sorted keys."""
    atomic_write(
        path,
        lambda fh: yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=True, allow_unicode=True),
    )


def iter_yaml_files(directory: PathLike) -> list[Path]:
    """List ``*.yaml``/``*.yml`` files of ``directory`` sorted by stem.

    Files merge in this order, so ``lifecycle.yaml`` lands before
    ``ports.yaml``. A stem present with both suffixes is read once, from
    ``.yaml``. A missing directory yields an empty list.
    """
    d = Path(directory)
    if not d.is_dir():
        return []
    by_stem: dict[str, Path] = {}
    for p in sorted(d.glob("*.yml")) + sorted(d.glob("*.yaml")):
        by_stem[p.stem] = p
    return [by_stem[stem] for stem in sorted(by_stem)]


__all__ = ["read_yaml", "write_yaml", "iter_yaml_files"]
