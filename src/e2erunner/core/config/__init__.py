"""Layered YAML configuration (bundled defaults, user overlays, env overrides)."""
from .cache import clear_all_caches, get_cached_config
from .manager import ConfigManager

__all__ = ["ConfigManager", "clear_all_caches", "get_cached_config"]
