from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from e2erunner.core.run import now_ms

from .models import ResourceRecord, RunEntry
from .store import LifecycleStore

logger = logging.getLogger(__name__)


class LifecycleRegistry:
    """Run-scoped record of spawned processes and claimed ports.

    Every operation round-trips through the store: nothing is cached between
    calls, so several runner processes can share one store file.
    """

    def __init__(self, store: Optional[LifecycleStore] = None) -> None:
        self.store = store if store is not None else LifecycleStore.from_config()

    def _record(
        self, run_id: str, name: str, description: str, *, pid: Optional[int] = None, port: Optional[int] = None
    ) -> ResourceRecord:
        with self.store.transaction() as entries:
            entry = entries.get(run_id)
            if entry is None:
                entry = RunEntry()
                entries[run_id] = entry
            record = entry.upsert(name, description)
            if pid is not None:
                record.pid = int(pid)
            if port is not None:
                record.port = int(port)
            entry.last_touched = now_ms()
        return record

    def record_pid(self, name: str, pid: int, run_id: str, description: str = "") -> ResourceRecord:
        """Record that ``name`` in run ``run_id`` is backed by process ``pid``."""
        record = self._record(run_id, name, description, pid=pid)
        logger.debug("Recorded pid %s for %s (run %s)", pid, name, run_id)
        return record

    def record_port(self, name: str, port: int, run_id: str, description: str = "") -> ResourceRecord:
        """Record that ``name`` in run ``run_id`` claimed TCP ``port``."""
        record = self._record(run_id, name, description, port=port)
        logger.debug("Recorded port %s for %s (run %s)", port, name, run_id)
        return record

    def get_entry(self, run_id: str) -> Optional[RunEntry]:
        return self.store.load().get(run_id)

    def list_run_ids(self) -> List[str]:
        return sorted(self.store.load().keys())

    def list_claimed_ports(self) -> Set[int]:
        """Every port recorded by any run (used as an allocator exclusion set)."""
        ports: Set[int] = set()
        for entry in self.store.load().values():
            ports.update(entry.ports())
        return ports

    def snapshot(self) -> Dict[str, dict]:
        """Plain-dict view of the whole store (for CLI output and run snapshots)."""
        return {run_id: entry.to_dict() for run_id, entry in sorted(self.store.load().items())}


__all__ = ["LifecycleRegistry"]
