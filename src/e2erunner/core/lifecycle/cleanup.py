"""Cleanup protocol for recorded runs.

``clean_target`` kills everything a run recorded and deletes its entry.
``clean_all`` does that for the current run and then sweeps every entry that
has not been touched within the expiry window (crashed or abandoned runs).

Kill failures never abort a cleanup: they are logged and reported, and the
entry is removed regardless, so a cleanup always ends with the entry gone.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol

from e2erunner.core.process import KillOutcome, ProcessKiller
from e2erunner.core.run import now_ms

from .store import LifecycleStore

logger = logging.getLogger(__name__)


class Killer(Protocol):
    def kill_pids(self, pids: Iterable[int]) -> List[KillOutcome]: ...

    def kill_ports(self, ports: Iterable[int]) -> List[KillOutcome]: ...


@dataclass
class CleanupReport:
    run_id: str
    found: bool = False
    removed: bool = False
    pids: List[int] = field(default_factory=list)
    ports: List[int] = field(default_factory=list)
    outcomes: List[KillOutcome] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and all(o.succeeded for o in self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "found": self.found,
            "removed": self.removed,
            "pids": list(self.pids),
            "ports": list(self.ports),
            "outcomes": [o.to_dict() for o in self.outcomes],
            "errors": list(self.errors),
        }


def _default_killer() -> Killer:
    return ProcessKiller.from_config()


def clean_target(store: LifecycleStore, run_id: str, *, killer: Optional[Killer] = None) -> CleanupReport:
    """Kill the pids and ports recorded for ``run_id`` and delete its entry.

    Idempotent: an unknown run id is a no-op.
    """
    report = CleanupReport(run_id=run_id)
    entry = store.load().get(run_id)
    if entry is None:
        logger.debug("No lifecycle entry for run %s", run_id)
        return report

    report.found = True
    report.pids = entry.pids()
    report.ports = entry.ports()
    logger.info("Cleaning run %s: pids=%s ports=%s", run_id, report.pids, report.ports)

    killer = killer if killer is not None else _default_killer()

    # Pids and ports are killed independently; one failing never skips the other.
    if report.pids:
        try:
            report.outcomes.extend(killer.kill_pids(report.pids) or [])
        except Exception as exc:  # noqa: BLE001 - cleanup continues past kill failures
            logger.warning("Killing pids %s of run %s failed: %s", report.pids, run_id, exc)
            report.errors.append(f"kill_pids: {exc}")
    if report.ports:
        try:
            report.outcomes.extend(killer.kill_ports(report.ports) or [])
        except Exception as exc:  # noqa: BLE001 - cleanup continues past kill failures
            logger.warning("Killing ports %s of run %s failed: %s", report.ports, run_id, exc)
            report.errors.append(f"kill_ports: {exc}")

    for outcome in report.outcomes:
        if not outcome.succeeded:
            logger.warning("Run %s: could not kill %s %s: %s", run_id, outcome.kind, outcome.target, outcome.message)

    with store.transaction() as entries:
        report.removed = entries.pop(run_id, None) is not None
    return report


def find_expired_runs(
    store: LifecycleStore,
    *,
    expire_after_seconds: Optional[float] = None,
    now: Optional[int] = None,
) -> List[str]:
    """Run ids whose ``last_touched`` is older than the expiry window."""
    if expire_after_seconds is None:
        from e2erunner.core.config.domains import LifecycleConfig

        expire_after_seconds = LifecycleConfig().expire_after_seconds
    expire_ms = int(float(expire_after_seconds) * 1000)
    current = now_ms() if now is None else int(now)
    return [
        run_id
        for run_id, entry in store.load().items()
        if entry.age_ms(current) > expire_ms
    ]


def clean_all(
    store: LifecycleStore,
    current_run_id: str,
    *,
    killer: Optional[Killer] = None,
    expire_after_seconds: Optional[float] = None,
    now: Optional[int] = None,
) -> List[CleanupReport]:
    """Clean ``current_run_id``, then every expired run, one after another.

    Each target reloads the store, so an entry written by another process
    between two targets survives.
    """
    killer = killer if killer is not None else _default_killer()
    reports = [clean_target(store, current_run_id, killer=killer)]

    expired = [
        run_id
        for run_id in find_expired_runs(store, expire_after_seconds=expire_after_seconds, now=now)
        if run_id != current_run_id
    ]
    if expired:
        logger.info("Sweeping %d expired run(s): %s", len(expired), ", ".join(expired))
    for run_id in expired:
        reports.append(clean_target(store, run_id, killer=killer))
    return reports


__all__ = ["CleanupReport", "Killer", "clean_all", "clean_target", "find_expired_runs"]
