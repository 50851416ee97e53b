"""
e2erunner run id command.

SUMMARY: Print a new run identifier for an output directory
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag
from e2erunner.core.run import new_run_id
from e2erunner.core.utils.paths import get_absolute_path

SUMMARY = "Print a new run identifier for an output directory"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--output-path",
        required=True,
        help="Output directory of the run",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development run (shared 'dev' identifier)",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    output_path = get_absolute_path(args.output_path)
    run_id = new_run_id(output_path, is_dev=args.dev)
    formatter.success({"run_id": run_id, "output_path": str(output_path)}, run_id)
    return 0
