"""Typed accessors over one section of the merged configuration."""
from __future__ import annotations

from functools import cached_property
from typing import Any, ClassVar, Dict, Mapping, Optional

from e2erunner.core.exceptions import ConfigError

from .cache import get_cached_config


class BaseDomainConfig:
    """Read one top-level section (``ports``, ``lifecycle``...) of the config.

    Subclasses set ``section_name`` and expose settings as cached properties
    with their fallbacks, so a partial user overlay never leaves a setting
    undefined. The loaded configuration is schema-validated, so a bad overlay
    or environment override raises ``ConfigError`` on construction. Passing
    ``config`` bypasses the loader entirely; tests use it to inject a mapping.
    """

    section_name: ClassVar[str] = ""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self._config: Dict[str, Any] = dict(get_cached_config(validate=True) if config is None else config)

    @cached_property
    def section(self) -> Dict[str, Any]:
        return self._config.get(self.section_name) or {}

    def _subsection(self, name: str) -> Dict[str, Any]:
        value = self.section.get(name) or {}
        if not isinstance(value, dict):
            raise ConfigError(
                f"{self.section_name}.{name} must be a mapping",
                context={"section": self.section_name, "key": name},
            )
        return value


__all__ = ["BaseDomainConfig"]
