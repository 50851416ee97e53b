"""Domain-specific configuration for logging."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LoggingConfig(BaseDomainConfig):
    section_name = "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level") or "INFO").upper()

    @cached_property
    def format(self) -> str:
        return str(self.section.get("format") or DEFAULT_LOG_FORMAT)

    @cached_property
    def file(self) -> Optional[Path]:
        """Log file path, resolved against the user directory when relative."""
        raw = self.section.get("file")
        if not raw:
            return None
        p = Path(str(raw)).expanduser()
        if p.is_absolute():
            return p
        from e2erunner.core.utils.paths import get_user_config_dir

        return get_user_config_dir(create=False) / p


__all__ = ["LoggingConfig", "DEFAULT_LOG_FORMAT"]
