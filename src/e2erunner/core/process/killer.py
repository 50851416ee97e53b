"""Best-effort process termination.

Every kill returns ``KillOutcome`` values instead of raising: a process that
is already gone counts as ``not_found``, an OS refusal as ``failed`` (logged at
WARNING). Callers aggregate outcomes; nothing here aborts a cleanup.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple, Union

import psutil

from .inspector import find_pids_by_pattern, find_pids_on_port

logger = logging.getLogger(__name__)

KillKind = Literal["pid", "port", "pattern"]
KillStatus = Literal["killed", "not_found", "failed"]

DEFAULT_WAIT_SECONDS = 3.0


@dataclass(frozen=True)
class KillOutcome:
    target: Union[int, str]
    kind: KillKind
    status: KillStatus
    pids: Tuple[int, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def attempted(self) -> bool:
        """A signal was actually sent (or refused)."""
        return self.status != "not_found"

    @property
    def succeeded(self) -> bool:
        """Nothing is left running; absence counts as success."""
        return self.status != "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "kind": self.kind,
            "status": self.status,
            "pids": list(self.pids),
            "message": self.message,
        }


def _as_list(value: Union[int, Iterable[int], None]) -> List[int]:
    if value is None:
        return []
    if isinstance(value, int):
        return [value]
    return [int(v) for v in value]


def _kill_tree(pid: int, *, include_children: bool, wait_seconds: float) -> KillOutcome:
    if pid <= 0:
        return KillOutcome(pid, "pid", "failed", (pid,), "invalid pid")
    if pid == os.getpid():
        logger.warning("Refusing to kill the current process (pid %s)", pid)
        return KillOutcome(pid, "pid", "failed", (pid,), "refusing to kill current process")

    try:
        proc = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return KillOutcome(pid, "pid", "not_found", (pid,), "no such process")

    targets: List[psutil.Process] = []
    if include_children:
        try:
            targets.extend(proc.children(recursive=True))
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass

    for child in targets:
        try:
            child.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied as exc:
            logger.warning("Could not kill child %s of %s: %s", child.pid, pid, exc)

    try:
        proc.kill()
    except psutil.NoSuchProcess:
        return KillOutcome(pid, "pid", "not_found", (pid,), "exited before kill")
    except psutil.AccessDenied as exc:
        logger.warning("Could not kill process %s: %s", pid, exc)
        return KillOutcome(pid, "pid", "failed", (pid,), f"access denied: {exc}")

    targets.append(proc)
    if wait_seconds > 0:
        _, alive = psutil.wait_procs(targets, timeout=wait_seconds)
        if alive:
            logger.warning(
                "Processes still alive %.1fs after SIGKILL: %s",
                wait_seconds,
                ", ".join(str(p.pid) for p in alive),
            )
    return KillOutcome(pid, "pid", "killed", (pid,))


def kill_pids(
    pids: Union[int, Iterable[int], None],
    *,
    include_children: bool = True,
    wait_seconds: float = DEFAULT_WAIT_SECONDS,
) -> List[KillOutcome]:
    """Forcefully terminate each pid (and by default its descendants)."""
    outcomes: List[KillOutcome] = []
    for pid in _as_list(pids):
        outcome = _kill_tree(pid, include_children=include_children, wait_seconds=wait_seconds)
        logger.info("kill pid %s: %s", pid, outcome.status)
        outcomes.append(outcome)
    return outcomes


def _aggregate(target: Union[int, str], kind: KillKind, pids: List[int], per_pid: List[KillOutcome]) -> KillOutcome:
    if not pids:
        return KillOutcome(target, kind, "not_found", (), "no matching process")
    failed = [o for o in per_pid if o.status == "failed"]
    if failed:
        return KillOutcome(target, kind, "failed", tuple(pids), "; ".join(o.message for o in failed))
    return KillOutcome(target, kind, "killed", tuple(pids))


def kill_ports(
    ports: Union[int, Iterable[int], None],
    *,
    include_children: bool = True,
    wait_seconds: float = DEFAULT_WAIT_SECONDS,
) -> List[KillOutcome]:
    """Terminate whatever listens on each port. A free port is ``not_found``."""
    outcomes: List[KillOutcome] = []
    for port in _as_list(ports):
        try:
            pids = sorted(find_pids_on_port(port))
        except (psutil.Error, OSError) as exc:
            logger.warning("Could not resolve owners of port %s: %s", port, exc)
            outcomes.append(KillOutcome(port, "port", "failed", (), str(exc)))
            continue
        per_pid = kill_pids(pids, include_children=include_children, wait_seconds=wait_seconds)
        outcome = _aggregate(port, "port", pids, per_pid)
        logger.info("kill port %s: %s %s", port, outcome.status, list(outcome.pids))
        outcomes.append(outcome)
    return outcomes


def kill_by_pattern(
    search: str,
    *,
    include_children: bool = True,
    wait_seconds: float = DEFAULT_WAIT_SECONDS,
) -> KillOutcome:
    """Terminate every process whose command line contains ``search``."""
    pids = find_pids_by_pattern(search)
    per_pid = kill_pids(pids, include_children=include_children, wait_seconds=wait_seconds)
    outcome = _aggregate(search, "pattern", pids, per_pid)
    logger.info("kill pattern %r: %s %s", search, outcome.status, list(outcome.pids))
    return outcome


class ProcessKiller:
    """Kill helpers bound to one set of options.

    Cleanup takes any object with ``kill_pids`` and ``kill_ports``; this is the
    production implementation.
    """

    def __init__(self, *, include_children: bool = True, wait_seconds: float = DEFAULT_WAIT_SECONDS) -> None:
        self.include_children = include_children
        self.wait_seconds = wait_seconds

    @classmethod
    def from_config(cls) -> "ProcessKiller":
        from e2erunner.core.config.domains import LifecycleConfig

        cfg = LifecycleConfig()
        return cls(include_children=cfg.kill_include_children, wait_seconds=cfg.kill_wait_seconds)

    def kill_pids(self, pids: Union[int, Iterable[int], None]) -> List[KillOutcome]:
        return kill_pids(pids, include_children=self.include_children, wait_seconds=self.wait_seconds)

    def kill_ports(self, ports: Union[int, Iterable[int], None]) -> List[KillOutcome]:
        return kill_ports(ports, include_children=self.include_children, wait_seconds=self.wait_seconds)

    def kill_by_pattern(self, search: str) -> KillOutcome:
        return kill_by_pattern(search, include_children=self.include_children, wait_seconds=self.wait_seconds)


async def exit_after(delay_seconds: float = 1.0, code: int = 0, *, reason: Optional[str] = None) -> None:
    """Force-exit the interpreter after ``delay_seconds`` so buffered logs can flush.

    Lingering child watchers or open handles never keep the process alive.
    """
    logger.info("Exiting with code %s in %.1fs%s", code, delay_seconds, f" ({reason})" if reason else "")
    await asyncio.sleep(max(0.0, float(delay_seconds)))
    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


__all__ = [
    "KillOutcome",
    "ProcessKiller",
    "exit_after",
    "kill_by_pattern",
    "kill_pids",
    "kill_ports",
]
