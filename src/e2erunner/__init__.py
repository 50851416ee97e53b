"""e2erunner: process and port lifecycle management for end-to-end test runs.

The public API is re-exported lazily so ``import e2erunner`` stays cheap for
the CLI.
"""

from __future__ import annotations

import importlib
from typing import Any

__version__ = "1.0.0"

_LAZY_EXPORTS = {
    "E2ERunner": "e2erunner.runner",
    "TrackedProcess": "e2erunner.runner",
    "LifecycleRegistry": "e2erunner.core.lifecycle",
    "LifecycleStore": "e2erunner.core.lifecycle",
    "clean_all": "e2erunner.core.lifecycle",
    "clean_target": "e2erunner.core.lifecycle",
    "find_available_port": "e2erunner.core.ports",
    "is_port_occupied": "e2erunner.core.ports",
    "kill_pids": "e2erunner.core.process",
    "kill_ports": "e2erunner.core.process",
    "kill_by_pattern": "e2erunner.core.process",
    "poll_until": "e2erunner.core.resilience",
    "wait_for_url": "e2erunner.core.resilience",
    "wait_for_file": "e2erunner.core.resilience",
    "new_run_id": "e2erunner.core.run",
}


def __getattr__(name: str) -> Any:
    module = _LAZY_EXPORTS.get(name)
    if module is None:
        raise AttributeError(f"module 'e2erunner' has no attribute {name!r}")
    return getattr(importlib.import_module(module), name)


__all__ = ["__version__", *_LAZY_EXPORTS]
