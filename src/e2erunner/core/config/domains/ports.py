"""Domain-specific configuration for port allocation.

Each resource kind (project dev server, mock server, proxy) has a floor port
the allocator starts scanning from, and an environment variable that pins the
port for a run. The environment is read on every call so a value exported
mid-process is honoured.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Optional

from e2erunner.core.exceptions import ConfigError

from ..base import BaseDomainConfig

MAX_PORT = 65535
DEFAULT_KINDS: Dict[str, Dict[str, object]] = {
    "project": {"floor": 3000, "env": "PROJECT_PORT"},
    "mockstar": {"floor": 9420, "env": "MOCKSTAR_PORT"},
    "whistle": {"floor": 9421, "env": "WHISTLE_PORT"},
}


def parse_port(value: object, *, source: str) -> int:
    """Parse ``value`` into a TCP port number or raise ``ConfigError``."""
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(
            f"{source} is not a valid port: {value!r}", context={"source": source, "value": value}
        ) from None
    if not 1 <= port <= MAX_PORT:
        raise ConfigError(
            f"{source} is out of range (1-{MAX_PORT}): {port}",
            context={"source": source, "value": port},
        )
    return port


@dataclass(frozen=True)
class PortKind:
    name: str
    floor: int
    env: Optional[str] = None

    def env_override(self) -> Optional[int]:
        """Return the port pinned through ``env`` for this kind, if any."""
        if not self.env:
            return None
        raw = os.environ.get(self.env)
        if raw is None or not raw.strip():
            return None
        return parse_port(raw, source=self.env)


class PortsConfig(BaseDomainConfig):
    """Typed access to ``ports.*``."""

    section_name = "ports"

    @cached_property
    def host(self) -> str:
        return str(self.section.get("host") or "")

    @cached_property
    def max_port(self) -> int:
        return int(self.section.get("max_port", MAX_PORT))

    @cached_property
    def default_start(self) -> int:
        return int(self.section.get("default_start", DEFAULT_KINDS["mockstar"]["floor"]))

    @cached_property
    def kinds(self) -> Dict[str, PortKind]:
        raw = self.section.get("kinds")
        if not isinstance(raw, dict):
            raw = DEFAULT_KINDS
        out: Dict[str, PortKind] = {}
        for name, entry in raw.items():
            entry = entry or {}
            out[str(name)] = PortKind(
                name=str(name),
                floor=int(entry.get("floor", self.default_start)),
                env=entry.get("env") or None,
            )
        return out

    def kind(self, name: str) -> PortKind:
        """Return the configured kind ``name``; raise ``ConfigError`` for unknown kinds."""
        try:
            return self.kinds[name]
        except KeyError:
            raise ConfigError(
                f"Unknown port kind: {name}",
                context={"kind": name, "known": sorted(self.kinds)},
            ) from None


__all__ = ["PortsConfig", "PortKind", "parse_port", "MAX_PORT"]
