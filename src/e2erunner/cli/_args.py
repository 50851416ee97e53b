"""Flags shared across command modules."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Print one JSON document instead of text")


def add_store_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        metavar="PATH",
        help="Lifecycle store file to use (default: lifecycle.store_file under the user directory)",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dry-run", action="store_true", help="Report what would be cleaned, kill nothing")


def add_poll_flags(parser: argparse.ArgumentParser) -> None:
    """``--retry-limit``/``--interval``; ``None`` means "use runner.poll.*"."""
    group = parser.add_argument_group("polling")
    group.add_argument(
        "--retry-limit",
        type=int,
        metavar="N",
        help="Checks after the first one before giving up (default: runner.poll.retry_limit)",
    )
    group.add_argument(
        "--interval",
        type=float,
        metavar="SECONDS",
        help="Pause between checks (default: runner.poll.interval_seconds)",
    )


__all__ = ["add_json_flag", "add_store_flag", "add_dry_run_flag", "add_poll_flags"]
