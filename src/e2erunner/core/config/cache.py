"""Centralized configuration caching.

Provides a single source of truth for loaded configuration across all domain
configs. The cache key includes every E2ERUNNER_* environment variable and the
mtimes of user config files, so tests and long-running processes never see
stale values after changing either.
"""
from __future__ import annotations

import copy
import hashlib
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

_config_cache: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


def _fingerprint_dir(d: Path) -> list[tuple[str, int, int]]:
    from e2erunner.core.utils.io import iter_yaml_files

    files: list[tuple[str, int, int]] = []
    for p in iter_yaml_files(d):
        try:
            st = p.stat()
            files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
        except OSError:
            files.append((p.name, 0, 0))
    return files


def _cache_key(user_root_dir: Path, validate: bool) -> str:
    from e2erunner.core.config.manager import ENV_PREFIX

    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]
    cfg_fp = hashlib.sha256(
        repr(_fingerprint_dir(user_root_dir / "config")).encode("utf-8")
    ).hexdigest()[:12]
    mode = "validated" if validate else "raw"
    return f"{user_root_dir}:{mode}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(
    user_root_dir: Optional[Path] = None, *, validate: bool = False
) -> Dict[str, Any]:
    """Return the merged configuration, loading it on first use.

    Args:
        user_root_dir: Per-user directory (resolved from env/defaults when None).
        validate: Validate the merged config against the bundled JSON schema.

    Returns:
        A deep copy of the cached config dict.
    """
    from e2erunner.core.config.manager import ConfigManager
    from e2erunner.core.utils.paths import get_user_config_dir

    root = Path(user_root_dir) if user_root_dir is not None else get_user_config_dir(create=False)
    key = _cache_key(root, validate)

    with _cache_lock:
        cached = _config_cache.get(key)
    if cached is None:
        cached = ConfigManager(user_root_dir=root)._load_config_uncached(validate=validate)
        with _cache_lock:
            _config_cache[key] = cached
    return copy.deepcopy(cached)


def clear_all_caches() -> None:
    """Drop every cached config (used by tests and after config edits)."""
    from e2erunner.data import clear_caches

    with _cache_lock:
        _config_cache.clear()
    clear_caches()


__all__ = ["get_cached_config", "clear_all_caches"]
