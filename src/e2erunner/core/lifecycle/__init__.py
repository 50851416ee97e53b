"""Run-scoped lifecycle registry of spawned processes and claimed ports."""
from .cleanup import CleanupReport, Killer, clean_all, clean_target, find_expired_runs
from .models import ResourceRecord, RunEntry
from .registry import LifecycleRegistry
from .store import LifecycleStore, default_store_path

__all__ = [
    "CleanupReport",
    "Killer",
    "LifecycleRegistry",
    "LifecycleStore",
    "ResourceRecord",
    "RunEntry",
    "clean_all",
    "clean_target",
    "default_store_path",
    "find_expired_runs",
]
