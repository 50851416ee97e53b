"""
Process and socket inspection backed by psutil.

Resolves which processes listen on a TCP port and which processes match a
command-line pattern. Lookups are best-effort: processes that vanish or deny
access mid-scan are skipped.
"""

from __future__ import annotations

import logging
import os
from typing import List, Set

import psutil

logger = logging.getLogger(__name__)


def is_process_alive(pid: int) -> bool:
    """Return True when ``pid`` exists and is not a zombie."""
    if pid <= 0:
        return False
    try:
        if not psutil.pid_exists(pid):
            return False
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return False
    except psutil.AccessDenied:
        # Exists but belongs to someone else.
        return True


def _listening_on(conn, port: int) -> bool:
    laddr = getattr(conn, "laddr", None)
    if not laddr:
        return False
    return laddr.port == port and conn.status == psutil.CONN_LISTEN


def _scan_processes_for_port(port: int) -> Set[int]:
    pids: Set[int] = set()
    for proc in psutil.process_iter(["pid"]):
        try:
            for conn in proc.net_connections(kind="inet"):
                if _listening_on(conn, port):
                    pids.add(proc.pid)
                    break
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return pids


def find_pids_on_port(port: int) -> Set[int]:
    """Return the pids with a listening socket on ``port``.

    Uses the system-wide connection table and falls back to a per-process
    scan when the platform denies system-wide access (macOS without root).
    """
    try:
        return {
            conn.pid
            for conn in psutil.net_connections(kind="inet")
            if conn.pid and _listening_on(conn, port)
        }
    except psutil.AccessDenied:
        logger.debug("System-wide connection table denied; scanning processes for port %s", port)
        return _scan_processes_for_port(port)


def find_pids_by_pattern(search: str) -> List[int]:
    """Return pids whose command line contains ``search`` (current process excluded)."""
    if not search:
        return []
    me = os.getpid()
    matches: List[int] = []
    for proc in psutil.process_iter(["pid", "cmdline"]):
        try:
            cmdline = " ".join(proc.info.get("cmdline") or [])
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        if proc.pid != me and search in cmdline:
            matches.append(proc.pid)
    return matches


__all__ = ["is_process_alive", "find_pids_on_port", "find_pids_by_pattern"]
