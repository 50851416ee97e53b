"""
e2erunner port kill command.

SUMMARY: Kill whatever listens on the given ports
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag
from e2erunner.core.config.domains import parse_port
from e2erunner.core.process import ProcessKiller

SUMMARY = "Kill whatever listens on the given ports"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("ports", nargs="+", help="TCP ports to free")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        ports = [parse_port(p, source="port argument") for p in args.ports]
        outcomes = ProcessKiller.from_config().kill_ports(ports)
        lines = [
            f"Port {o.target}: {o.status}" + (f" (pids {', '.join(map(str, o.pids))})" if o.pids else "")
            for o in outcomes
        ]
        formatter.success({"outcomes": [o.to_dict() for o in outcomes]}, "\n".join(lines))
        return 0 if all(o.succeeded for o in outcomes) else 1

    except Exception as e:
        formatter.error(e, error_code="port_kill_error")
        return 1
