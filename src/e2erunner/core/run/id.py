"""Run identifiers.

A run identifier scopes every process and port recorded in the lifecycle
store. Development runs share the fixed ``dev`` identifier so a restarted dev
session cleans up after its predecessor; every other run gets a short tag
derived from its output path plus the creation time in epoch milliseconds.
"""
from __future__ import annotations

import base64
import time
from typing import Optional

from e2erunner.core.utils.io import PathLike

DEV_RUN_ID = "dev"
RUN_ID_TAG_LENGTH = 6


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def get_base64(data: str, length: Optional[int] = None) -> str:
    """Base64 of ``data`` (UTF-8), keeping only the last ``length`` characters when given."""
    encoded = base64.b64encode(str(data).encode("utf-8")).decode("ascii")
    if length is not None and length > 0:
        return encoded[-length:]
    return encoded


def new_run_id(output_path: PathLike, is_dev: bool = False, *, timestamp_ms: Optional[int] = None) -> str:
    """Create the identifier for one run.

    Args:
        output_path: Output directory of the run; its encoded tail forms the prefix.
        is_dev: Development runs always use ``DEV_RUN_ID``.
        timestamp_ms: Creation time override (epoch ms), mainly for tests.

    Returns:
        ``"dev"`` or ``<6-char tag><epoch ms>``. Never contains ``=``.
    """
    if is_dev:
        return DEV_RUN_ID
    tag = get_base64(str(output_path), RUN_ID_TAG_LENGTH).replace("=", "d")
    stamp = now_ms() if timestamp_ms is None else int(timestamp_ms)
    return f"{tag}{stamp}"


__all__ = ["DEV_RUN_ID", "get_base64", "new_run_id", "now_ms"]
