from __future__ import annotations

import logging
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class ResourceRecord:
    """One named slot of a run: a spawned process, a claimed port, or both."""

    name: str
    pid: Optional[int] = None
    port: Optional[int] = None
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.pid is not None:
            data["pid"] = self.pid
        if self.port is not None:
            data["port"] = self.port
        return data

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Optional["ResourceRecord"]:
        name = raw.get("name")
        if name is None or str(name) == "":
            return None
        return cls(
            name=str(name),
            pid=_as_int(raw.get("pid")),
            port=_as_int(raw.get("port")),
            description=str(raw.get("description") or ""),
        )


@dataclass
class RunEntry:
    """Resources recorded for one run, in insertion order."""

    resources: List[ResourceRecord] = field(default_factory=list)
    last_touched: int = 0

    def find(self, name: str) -> Optional[ResourceRecord]:
        for record in self.resources:
            if record.name == name:
                return record
        return None

    def upsert(self, name: str, description: str = "") -> ResourceRecord:
        """Return the record called ``name``, appending a new one when missing.

        The description is overwritten on every call.
        """
        record = self.find(name)
        if record is None:
            record = ResourceRecord(name=name)
            self.resources.append(record)
        record.description = description
        return record

    def pids(self) -> List[int]:
        return _unique(r.pid for r in self.resources if r.pid is not None)

    def ports(self) -> List[int]:
        return _unique(r.port for r in self.resources if r.port is not None)

    def age_ms(self, now: int) -> int:
        return now - self.last_touched

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "lastTouched": self.last_touched,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RunEntry":
        records: List[ResourceRecord] = []
        items = raw.get("resources")
        if isinstance(items, list):
            for item in items:
                record = ResourceRecord.from_dict(item) if isinstance(item, Mapping) else None
                if record is None:
                    logger.warning("Skipping malformed resource record: %r", item)
                    continue
                records.append(record)
        # Missing or unreadable timestamps count as the epoch, so the entry is expired.
        touched = _as_int(raw.get("lastTouched")) or 0
        return cls(resources=records, last_touched=touched)


def _unique(values) -> List[int]:
    seen: List[int] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


__all__ = ["ResourceRecord", "RunEntry"]
