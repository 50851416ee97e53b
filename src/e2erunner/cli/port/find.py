"""
e2erunner port find command.

SUMMARY: Print the first free port at or above a start port
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag, add_store_flag, get_store
from e2erunner.core.config.domains import PortsConfig
from e2erunner.core.lifecycle import LifecycleRegistry
from e2erunner.core.ports import find_available_port

SUMMARY = "Print the first free port at or above a start port"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--start",
        type=int,
        default=None,
        help="First candidate port (default: ports.default_start)",
    )
    parser.add_argument(
        "--skip",
        type=int,
        nargs="*",
        default=[],
        help="Ports never returned even when free",
    )
    parser.add_argument(
        "--skip-claimed",
        action="store_true",
        help="Also skip every port recorded in the lifecycle store",
    )
    add_store_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        cfg = PortsConfig()
        start = args.start if args.start is not None else cfg.default_start
        skip = set(args.skip or [])
        if args.skip_claimed:
            skip |= LifecycleRegistry(get_store(args)).list_claimed_ports()

        port = find_available_port(start, skip, max_port=cfg.max_port, host=cfg.host)
        formatter.success({"port": port, "start": start}, str(port))
        return 0

    except Exception as e:
        formatter.error(e, error_code="port_find_error")
        return 1
