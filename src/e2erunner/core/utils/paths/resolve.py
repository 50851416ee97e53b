from __future__ import annotations

from pathlib import Path

from e2erunner.core.utils.io import PathLike


def get_absolute_path(target: PathLike, base: PathLike | None = None) -> Path:
    """Return ``target`` as an absolute path.

    Relative targets resolve against ``base`` (default: current working directory).
    ``~`` is expanded.
    """
    p = Path(target).expanduser()
    if p.is_absolute():
        return p.resolve()
    root = Path(base).expanduser() if base is not None else Path.cwd()
    return (root / p).resolve()


__all__ = ["get_absolute_path"]
