"""TCP port occupancy probing and allocation.

A port counts as occupied when binding it fails. The allocator scans upwards
from a floor, skipping an exclusion set (typically every port already claimed
in the lifecycle store), and gives up at the configured upper bound.
"""
from __future__ import annotations

import logging
import socket
from typing import Iterable, Optional

from e2erunner.core.exceptions import PortExhaustedError

logger = logging.getLogger(__name__)

MAX_PORT = 65535


def _validate_port(name: str, port: int) -> None:
    if not 1 <= int(port) <= MAX_PORT:
        raise ValueError(f"{name} must be between 1 and {MAX_PORT} (got {port})")


def is_port_occupied(port: int, *, host: str = "") -> bool:
    """Return True when ``port`` cannot be bound on ``host`` ("" means every interface)."""
    _validate_port("port", port)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, int(port)))
        except OSError:
            return True
    return False


def find_available_port(
    start_port: int,
    skip: Optional[Iterable[int]] = None,
    *,
    max_port: int = MAX_PORT,
    host: str = "",
) -> int:
    """Return the first port >= ``start_port`` that is neither skipped nor occupied.

    Args:
        start_port: First candidate.
        skip: Ports never returned, even when free.
        max_port: Last candidate (inclusive).
        host: Bind host for the occupancy probe.

    Raises:
        ValueError: ``start_port`` or ``max_port`` outside 1..65535.
        PortExhaustedError: Every candidate up to ``max_port`` is skipped or occupied.
    """
    _validate_port("start_port", start_port)
    _validate_port("max_port", max_port)
    excluded = {int(p) for p in (skip or ())}

    for port in range(int(start_port), int(max_port) + 1):
        if port in excluded:
            continue
        if not is_port_occupied(port, host=host):
            logger.debug("Found available port %s (start %s)", port, start_port)
            return port

    raise PortExhaustedError(
        f"No available port between {start_port} and {max_port}",
        context={"start_port": start_port, "max_port": max_port, "skipped": sorted(excluded)},
    )


__all__ = ["MAX_PORT", "find_available_port", "is_port_occupied"]
