"""
e2erunner port check command.

SUMMARY: Report whether a port is occupied and who owns it
"""

from __future__ import annotations

import argparse

import psutil

from e2erunner.cli import OutputFormatter, add_json_flag
from e2erunner.core.config.domains import PortsConfig, parse_port
from e2erunner.core.ports import is_port_occupied
from e2erunner.core.process import find_pids_on_port

SUMMARY = "Report whether a port is occupied and who owns it"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("port", help="TCP port to check")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Exit code 0 when the port is free, 2 when occupied."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        port = parse_port(args.port, source="port argument")
        occupied = is_port_occupied(port, host=PortsConfig().host)
        owners: list[int] = []
        if occupied:
            try:
                owners = sorted(find_pids_on_port(port))
            except (psutil.Error, OSError):
                owners = []

        if occupied:
            who = f" by pid(s) {', '.join(str(p) for p in owners)}" if owners else ""
            message = f"Port {port} is occupied{who}"
        else:
            message = f"Port {port} is free"
        formatter.success({"port": port, "occupied": occupied, "pids": owners}, message)
        return 2 if occupied else 0

    except Exception as e:
        formatter.error(e, error_code="port_check_error")
        return 1
