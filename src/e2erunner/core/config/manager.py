"""
e2erunner configuration management (YAML-only).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema
import yaml

from e2erunner.core.exceptions import ConfigError
from e2erunner.core.utils.io import iter_yaml_files, read_yaml
from e2erunner.core.utils.merge import deep_merge
from e2erunner.data import get_data_path, read_yaml as read_data_yaml

# Module logger (warnings are user-visible via CLI log config).
logger = logging.getLogger(__name__)

ENV_PREFIX = "E2ERUNNER_"
CONFIG_SCHEMA = "config.schema.yaml"


class ConfigManager:
    """Load, merge, and validate e2erunner configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: E2ERUNNER_<section>__<key>
    2. User config: <user-config-dir>/config/*.yaml (alphabetical order)
    3. Bundled defaults: e2erunner.data/config/*.yaml (alphabetical order)

    Per-run environment switches (DWT_MODE and the per-kind port variables)
    are not merged here; their domain accessors read them on every call.
    """

    def __init__(self, user_root_dir: Optional[Path] = None) -> None:
        if user_root_dir is None:
            from e2erunner.core.utils.paths import get_user_config_dir

            user_root_dir = get_user_config_dir(create=False)
        self.user_root_dir = Path(user_root_dir)

        # Bundled defaults from the e2erunner.data package (always available)
        self.core_config_dir = get_data_path("config")
        # User-specific overlays (e.g. ~/.e2erunner/config)
        self.user_config_dir = self.user_root_dir / "config"

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Configuration never silently ignores invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file must contain a mapping: {path}",
                context={"path": str(path), "type": type(data).__name__},
            )
        return data

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        if value.strip().lower() in {"null", "none", "~"}:
            return None
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ConfigError(
                f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                context={"key": f"{ENV_PREFIX}{raw}"},
            )
        # Section and key names are canonical lowercase.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):])
            if not path:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Dict[str, Any] = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if nxt is None:
                nxt = {}
                cur[part] = nxt
            if not isinstance(nxt, dict):
                raise ConfigError(
                    f"Cannot override '{'.'.join(path)}': '{part}' is not a mapping",
                    context={"path": path},
                )
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        """Merge every YAML file of ``directory`` into ``cfg`` (missing dirs are ignored)."""
        merged: Dict[str, Any] = dict(cfg)
        for path in iter_yaml_files(directory):
            merged = deep_merge(merged, self.load_yaml(path))
        return merged

    def validate_schema(self, config: Dict[str, Any]) -> None:
        schema = read_data_yaml("schemas", CONFIG_SCHEMA)
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: list(e.path))
        if errors:
            messages = [
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}"
                for err in errors
            ]
            raise ConfigError(
                "Invalid configuration: " + "; ".join(messages),
                context={"errors": messages},
            )

    def _load_config_uncached(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from every source (UNCACHED)."""
        cfg: Dict[str, Any] = {}
        # Layer 1: bundled defaults
        cfg = self._load_directory(self.core_config_dir, cfg)
        # Layer 2: user overlays
        cfg = self._load_directory(self.user_config_dir, cfg)
        # Layer 3: environment overrides
        self.apply_env_overrides(cfg)

        if validate:
            self.validate_schema(cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration through the centralized cache.

        Returned dict should be treated as immutable.
        """
        from e2erunner.core.config.cache import get_cached_config

        return get_cached_config(user_root_dir=self.user_root_dir, validate=validate)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> manager.get('lifecycle.expire_after_seconds')
            7200
        """
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "ENV_PREFIX"]
