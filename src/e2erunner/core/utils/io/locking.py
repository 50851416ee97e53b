"""Advisory cross-process lock for read-modify-write of shared files."""
from __future__ import annotations

import fcntl
import time
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from .core import PathLike, ensure_directory

DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0
DEFAULT_LOCK_POLL_INTERVAL_SECONDS = 0.05


class LockTimeoutError(TimeoutError):
    """Raised when another holder keeps the lock past the timeout."""


def lock_path_for(target: PathLike) -> Path:
    """Sidecar lock file of ``target`` (``lifecycle.yml`` -> ``lifecycle.yml.lock``)."""
    target = Path(target)
    return target.with_name(target.name + ".lock")


@contextmanager
def acquire_file_lock(
    target: PathLike,
    *,
    timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    poll_interval: float = DEFAULT_LOCK_POLL_INTERVAL_SECONDS,
) -> Iterator[IO[str]]:
    """Hold an exclusive ``flock`` on the sidecar lock file of ``target``.

    The lock lives on a sidecar so ``target`` itself can still be replaced
    by :func:`atomic_write` while the lock is held. Every ``open`` gets its
    own lock, so two threads of one process exclude each other too.

    Raises:
        ValueError: ``timeout`` or ``poll_interval`` is not positive.
        LockTimeoutError: The lock was not obtained within ``timeout`` seconds.
    """
    if timeout <= 0 or poll_interval <= 0:
        raise ValueError(f"timeout and poll_interval must be positive (got {timeout}, {poll_interval})")

    lock_path = lock_path_for(target)
    ensure_directory(lock_path.parent)
    deadline = time.monotonic() + timeout

    with open(lock_path, "a+", encoding="utf-8") as fh:
        while True:
            try:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LockTimeoutError(f"Could not lock {target} within {timeout}s") from None
                time.sleep(poll_interval)
        try:
            yield fh
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


__all__ = [
    "DEFAULT_LOCK_TIMEOUT_SECONDS",
    "DEFAULT_LOCK_POLL_INTERVAL_SECONDS",
    "LockTimeoutError",
    "acquire_file_lock",
    "lock_path_for",
]
