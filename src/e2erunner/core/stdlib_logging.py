from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from e2erunner.core.utils.io import ensure_directory

_CONFIGURED: bool = False
_INSTALLED_HANDLERS: list[logging.Handler] = []


def _level_from_name(name: str) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    *,
    level: Optional[str] = None,
    log_path: Optional[Path] = None,
    stream: bool = True,
) -> None:
    """Configure stdlib logging for e2erunner (stderr handler plus optional file).

    Defaults come from the ``logging`` config section. Idempotent per-process:
    a second call replaces the handlers installed by the first one and leaves
    handlers installed by the host application alone.
    """
    global _CONFIGURED

    from e2erunner.core.config.domains import LoggingConfig

    cfg = LoggingConfig()
    effective_level = _level_from_name(level or cfg.level)
    effective_path = Path(log_path) if log_path is not None else cfg.file
    fmt = logging.Formatter(cfg.format)

    root = logging.getLogger()
    root.setLevel(effective_level)

    for h in _INSTALLED_HANDLERS:
        root.removeHandler(h)
        h.close()
    _INSTALLED_HANDLERS.clear()

    if stream:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(effective_level)
        sh.setFormatter(fmt)
        root.addHandler(sh)
        _INSTALLED_HANDLERS.append(sh)

    if effective_path is not None:
        resolved = effective_path.resolve()
        ensure_directory(resolved.parent)
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setLevel(effective_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)
        _INSTALLED_HANDLERS.append(fh)

    if not _INSTALLED_HANDLERS:
        # Otherwise logging.lastResort prints WARNING+ to stderr.
        nh = logging.NullHandler()
        root.addHandler(nh)
        _INSTALLED_HANDLERS.append(nh)

    _CONFIGURED = True


def is_configured() -> bool:
    return _CONFIGURED


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by ``configure_logging``."""
    global _CONFIGURED
    root = logging.getLogger()
    for h in _INSTALLED_HANDLERS:
        root.removeHandler(h)
        h.close()
    _INSTALLED_HANDLERS.clear()
    _CONFIGURED = False


__all__ = ["configure_logging", "is_configured", "reset_logging_for_tests"]
