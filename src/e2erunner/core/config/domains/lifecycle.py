"""Domain-specific configuration for the lifecycle store and cleanup."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig

DEFAULT_STORE_FILE = "lifecycle.yml"
DEFAULT_EXPIRE_AFTER_SECONDS = 2 * 60 * 60


class LifecycleConfig(BaseDomainConfig):
    """Typed access to ``lifecycle.*``: store location, expiry, lock and kill options."""

    section_name = "lifecycle"

    @cached_property
    def store_file(self) -> str:
        return str(self.section.get("store_file") or DEFAULT_STORE_FILE)

    def store_path(self, *, create: bool = True) -> Path:
        """Absolute path of the store document under the user directory.

        The user directory is created on first access when ``create`` is True.
        """
        from e2erunner.core.utils.paths import get_user_config_dir

        p = Path(self.store_file).expanduser()
        if p.is_absolute():
            return p
        return get_user_config_dir(create=create) / p

    @cached_property
    def expire_after_seconds(self) -> float:
        return float(self.section.get("expire_after_seconds", DEFAULT_EXPIRE_AFTER_SECONDS))

    @property
    def expire_after_ms(self) -> int:
        return int(self.expire_after_seconds * 1000)

    @cached_property
    def lock_enabled(self) -> bool:
        return bool(self._subsection("lock").get("enabled", False))

    @cached_property
    def lock_timeout_seconds(self) -> float:
        return float(self._subsection("lock").get("timeout_seconds", 10.0))

    @cached_property
    def lock_poll_interval_seconds(self) -> float:
        return float(self._subsection("lock").get("poll_interval_seconds", 0.05))

    @cached_property
    def kill_include_children(self) -> bool:
        return bool(self._subsection("kill").get("include_children", True))

    @cached_property
    def kill_wait_seconds(self) -> float:
        return float(self._subsection("kill").get("wait_seconds", 3.0))


__all__ = ["LifecycleConfig", "DEFAULT_EXPIRE_AFTER_SECONDS", "DEFAULT_STORE_FILE"]
