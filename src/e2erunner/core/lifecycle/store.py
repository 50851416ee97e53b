"""On-disk lifecycle store.

A single YAML document maps run identifiers to their recorded resources::

    <run id>:
      lastTouched: 1700000000000
      resources:
      - name: mockstar-start
        pid: 1234
        port: 9420
        description: npx mockstar run -p 9420

The document is read lazily, mutated in memory and written back wholesale on
every mutating call. Concurrent writers from separate processes race at
whole-document granularity (last write wins) unless the advisory lock is
enabled, in which case each read-modify-write runs under ``transaction()``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager, nullcontext
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from e2erunner.core.exceptions import LifecycleStoreError, StoreCorruptError
from e2erunner.core.utils.io import PathLike, acquire_file_lock, read_yaml, write_yaml
from e2erunner.core.utils.io.locking import DEFAULT_LOCK_POLL_INTERVAL_SECONDS, DEFAULT_LOCK_TIMEOUT_SECONDS

from .models import RunEntry

logger = logging.getLogger(__name__)

Entries = Dict[str, RunEntry]


def default_store_path() -> Path:
    """Store path from configuration (creates the user directory on first access)."""
    from e2erunner.core.config.domains import LifecycleConfig

    return LifecycleConfig().store_path(create=True)


class LifecycleStore:
    """Persistent mapping of run id to ``RunEntry`` backed by one YAML file."""

    def __init__(
        self,
        path: Optional[PathLike] = None,
        *,
        lock: bool = False,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
        lock_poll_interval: float = DEFAULT_LOCK_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.path = Path(path) if path is not None else default_store_path()
        self.lock = lock
        self.lock_timeout = lock_timeout
        self.lock_poll_interval = lock_poll_interval

    @classmethod
    def from_config(cls, path: Optional[PathLike] = None) -> "LifecycleStore":
        """Build a store honouring the ``lifecycle.lock`` settings."""
        from e2erunner.core.config.domains import LifecycleConfig

        cfg = LifecycleConfig()
        return cls(
            path if path is not None else cfg.store_path(create=True),
            lock=cfg.lock_enabled,
            lock_timeout=cfg.lock_timeout_seconds,
            lock_poll_interval=cfg.lock_poll_interval_seconds,
        )

    def __repr__(self) -> str:
        return f"LifecycleStore(path={str(self.path)!r}, lock={self.lock})"

    def read_document(self) -> Dict[str, Any]:
        """Return the raw document.

        Raises:
            StoreCorruptError: The file exists but is not valid YAML or not a mapping.
        """
        try:
            data = read_yaml(self.path, default={}, raise_on_error=True)
        except FileNotFoundError:
            return {}
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise StoreCorruptError(
                f"Lifecycle store is not valid YAML: {self.path}",
                context={"path": str(self.path), "error": str(exc)},
            ) from exc
        if not isinstance(data, dict):
            raise StoreCorruptError(
                f"Lifecycle store must contain a mapping: {self.path}",
                context={"path": str(self.path), "type": type(data).__name__},
            )
        return data

    def load(self) -> Entries:
        """Load every entry; a missing, empty or corrupt store loads as empty."""
        try:
            raw = self.read_document()
        except StoreCorruptError as exc:
            logger.warning("%s; treating it as empty (%s)", exc, exc.context.get("error", ""))
            return {}

        entries: Entries = {}
        for run_id, value in raw.items():
            if not isinstance(value, Mapping):
                logger.warning("Skipping malformed lifecycle entry %r in %s", run_id, self.path)
                continue
            entries[str(run_id)] = RunEntry.from_dict(value)
        return entries

    def save(self, entries: Optional[Mapping[str, RunEntry]]) -> None:
        """Persist ``entries`` as the whole document.

        Raises:
            LifecycleStoreError: ``entries`` is None (an empty mapping is fine).
        """
        if entries is None:
            raise LifecycleStoreError(
                "Refusing to save a missing lifecycle document", context={"path": str(self.path)}
            )
        document = {run_id: entry.to_dict() for run_id, entry in entries.items()}
        write_yaml(self.path, document)

    def _lock_context(self):
        if not self.lock:
            return nullcontext()
        return acquire_file_lock(
            self.path, timeout=self.lock_timeout, poll_interval=self.lock_poll_interval
        )

    @contextmanager
    def transaction(self) -> Iterator[Entries]:
        """Load, yield for in-place mutation, then save on clean exit."""
        with self._lock_context():
            entries = self.load()
            yield entries
            self.save(entries)


__all__ = ["LifecycleStore", "Entries", "default_store_path"]
