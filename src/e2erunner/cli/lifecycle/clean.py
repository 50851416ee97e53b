"""
e2erunner lifecycle clean command.

SUMMARY: Kill everything a run recorded and delete its entry
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag, add_store_flag, get_store
from e2erunner.core.lifecycle import clean_target

SUMMARY = "Kill everything a run recorded and delete its entry"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--run-id",
        required=True,
        help="Run identifier to clean",
    )
    add_store_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        report = clean_target(get_store(args), args.run_id)
        if not report.found:
            message = f"No recorded run {args.run_id}"
        else:
            message = (
                f"Cleaned run {args.run_id}: "
                f"{len(report.pids)} pid(s), {len(report.ports)} port(s)"
            )
            failed = [o for o in report.outcomes if not o.succeeded]
            if failed or report.errors:
                message += f", {len(failed) + len(report.errors)} failure(s)"
        formatter.success(report.to_dict(), message)
        return 0

    except Exception as e:
        formatter.error(e, error_code="lifecycle_clean_error")
        return 1
