"""Run orchestration: tracked command execution, port claims, start/stop cleanup."""
from .runner import CommandSource, E2ERunner, ProcessCommand, get_from_str_or_func
from .spawn import ReadyPredicate, TrackedProcess, start_tracked_process

__all__ = [
    "CommandSource",
    "E2ERunner",
    "ProcessCommand",
    "ReadyPredicate",
    "TrackedProcess",
    "get_from_str_or_func",
    "start_tracked_process",
]
