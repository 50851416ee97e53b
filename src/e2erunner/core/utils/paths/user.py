"""User state path resolution.

This module centralizes detection of the per-user e2erunner directory
(default: ``~/.e2erunner``), which holds the lifecycle store and optional
user configuration overlays.

Precedence (highest to lowest):
1. Environment variable: E2ERUNNER_paths__user_config_dir
2. Bundled defaults: e2erunner.data/config/paths.yaml (paths.user_config_dir)
3. Hardcoded fallback: ".e2erunner"

The directory name is resolved relative to the user's home directory unless an
absolute path is provided.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from e2erunner.data import read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

DEFAULT_USER_CONFIG_PRIMARY = ".e2erunner"
USER_CONFIG_DIR_ENV = "E2ERUNNER_paths__user_config_dir"


def _resolve_user_dir_name() -> str:
    """Resolve the user dir name using precedence.

    There is no user-level override for this value (it would be
    self-referential); use the environment variable instead.
    """
    env_override = os.environ.get(USER_CONFIG_DIR_ENV)
    if isinstance(env_override, str) and env_override.strip():
        return env_override.strip()

    try:
        data = read_data_yaml("config", "paths.yaml") or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.debug("Bundled paths.yaml unreadable: %s", exc)
        data = {}

    section = data.get("paths") if isinstance(data, dict) else None
    if isinstance(section, dict):
        value = section.get("user_config_dir")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return DEFAULT_USER_CONFIG_PRIMARY


def get_user_config_dir(*, create: bool = True) -> Path:
    """Return the user directory resolved via config/env.

    The resolved path is absolute. Relative values are treated as relative to
    the user's home directory (not CWD).
    """
    from e2erunner.core.utils.io import ensure_directory

    p = Path(_resolve_user_dir_name()).expanduser()
    if not p.is_absolute():
        p = Path.home() / p

    resolved = p.resolve()
    if create:
        ensure_directory(resolved)
    return resolved


__all__ = [
    "DEFAULT_USER_CONFIG_PRIMARY",
    "USER_CONFIG_DIR_ENV",
    "get_user_config_dir",
]
