"""Low-level file primitives shared by the YAML and JSON helpers.

Every persistent file e2erunner owns (the lifecycle store, the
``e2eRunner.json`` snapshot) goes through :func:`atomic_write`, so a reader
in another test process never sees a half-written document.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Callable, TextIO, Union

PathLike = Union[str, Path]


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) when missing and return it.

    Raises:
        NotADirectoryError: If ``path`` exists as a regular file.
    """
    path = Path(path)
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: PathLike, write_fn: Callable[[TextIO], None], *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with whatever ``write_fn`` writes.

    The content goes to a sibling temp file that is fsync'd and then renamed
    over ``path``. The temp file is removed when ``write_fn`` raises.
    """
    path = Path(path)
    ensure_directory(path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            write_fn(fh)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


__all__ = ["PathLike", "ensure_directory", "atomic_write"]
