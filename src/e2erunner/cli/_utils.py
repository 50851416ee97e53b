"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse

from e2erunner.core.lifecycle import LifecycleStore


def get_store(args: argparse.Namespace) -> LifecycleStore:
    """Lifecycle store selected by ``--store`` or configuration."""
    return LifecycleStore.from_config(getattr(args, "store", None) or None)


__all__ = ["get_store"]
