from .inspector import find_pids_by_pattern, find_pids_on_port, is_process_alive
from .killer import (
    KillOutcome,
    ProcessKiller,
    exit_after,
    kill_by_pattern,
    kill_pids,
    kill_ports,
)

__all__ = [
    "KillOutcome",
    "ProcessKiller",
    "exit_after",
    "find_pids_by_pattern",
    "find_pids_on_port",
    "is_process_alive",
    "kill_by_pattern",
    "kill_pids",
    "kill_ports",
]
