"""Domain-specific configuration for the run orchestrator.

Includes the run-mode switch: the ``DWT_MODE`` environment variable selects
which suites run (``unit``, ``e2e``, anything else means both).
"""
from __future__ import annotations

import os
from functools import cached_property
from typing import Optional

from ..base import BaseDomainConfig

MODE_UNIT = "unit"
MODE_E2E = "e2e"


class RunnerConfig(BaseDomainConfig):
    """Typed access to ``runner.*``."""

    section_name = "runner"

    @cached_property
    def mode_env(self) -> str:
        return str(self.section.get("mode_env") or "DWT_MODE")

    @property
    def mode(self) -> Optional[str]:
        """Active run mode: the environment variable wins over ``runner.mode``."""
        raw = os.environ.get(self.mode_env)
        if raw is None or not raw.strip():
            raw = self.section.get("mode")
        if raw is None:
            return None
        value = str(raw).strip().lower()
        return value or None

    def should_run_unit_test(self, is_run: Optional[bool] = None) -> bool:
        """Whether unit tests run; an explicit ``is_run`` always wins."""
        if is_run is not None:
            return bool(is_run)
        return self.mode != MODE_E2E

    def should_run_e2e_test(self, is_run: Optional[bool] = None) -> bool:
        """Whether end-to-end tests run; an explicit ``is_run`` always wins."""
        if is_run is not None:
            return bool(is_run)
        return self.mode != MODE_UNIT

    @cached_property
    def npm_runner(self) -> str:
        return str(self.section.get("npm_runner") or "npm")

    @cached_property
    def poll_retry_limit(self) -> int:
        return int(self._subsection("poll").get("retry_limit", 10))

    @cached_property
    def poll_interval_seconds(self) -> float:
        return float(self._subsection("poll").get("interval_seconds", 1.0))

    @cached_property
    def http_timeout_seconds(self) -> float:
        return float(self._subsection("poll").get("http_timeout_seconds", 5.0))

    @cached_property
    def spawn_timeout_seconds(self) -> float:
        return float(self._subsection("spawn").get("timeout_seconds", 600))

    @cached_property
    def output_tail_lines(self) -> int:
        return int(self._subsection("spawn").get("output_tail_lines", 200))

    @cached_property
    def snapshot_file(self) -> str:
        return str(self._subsection("stop").get("snapshot_file") or "e2eRunner.json")

    @cached_property
    def exit_delay_seconds(self) -> float:
        return float(self._subsection("stop").get("exit_delay_seconds", 2.0))


__all__ = ["RunnerConfig", "MODE_UNIT", "MODE_E2E"]
