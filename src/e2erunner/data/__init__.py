"""Bundled configuration defaults and schemas.

``config/`` holds one YAML file per config section and ``schemas/`` the
JSON Schema (written in YAML) the merged configuration is validated against.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """Absolute path of a bundled data directory, or of a file inside it."""
    base = Path(str(resources.files("e2erunner.data") / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=16)
def read_yaml(subpackage: str, filename: str) -> Any:
    """Parse a bundled YAML file; results are cached for the process."""
    return yaml.safe_load(get_data_path(subpackage, filename).read_text(encoding="utf-8"))


def clear_caches() -> None:
    read_yaml.cache_clear()


__all__ = ["get_data_path", "read_yaml", "clear_caches"]
