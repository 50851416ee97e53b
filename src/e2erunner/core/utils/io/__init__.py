"""File I/O helpers (atomic writes, YAML/JSON, advisory locks)."""
from __future__ import annotations

from .core import PathLike, atomic_write, ensure_directory
from .json import read_json, write_json_atomic
from .locking import LockTimeoutError, acquire_file_lock
from .yaml import iter_yaml_files, read_yaml, write_yaml

__all__ = [
    "PathLike",
    "atomic_write",
    "ensure_directory",
    "read_json",
    "write_json_atomic",
    "LockTimeoutError",
    "acquire_file_lock",
    "iter_yaml_files",
    "read_yaml",
    "write_yaml",
]
