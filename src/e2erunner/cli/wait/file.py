"""
e2erunner wait file command.

SUMMARY: Poll until a file exists
"""

from __future__ import annotations

import argparse
import asyncio

from e2erunner.cli import OutputFormatter, add_json_flag, add_poll_flags
from e2erunner.core.config.domains import RunnerConfig
from e2erunner.core.exceptions import RetryExhaustedError
from e2erunner.core.resilience import wait_for_file
from e2erunner.core.utils.paths import get_absolute_path

SUMMARY = "Poll until a file exists"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("path", help="File path (relative paths resolve against the working directory)")
    add_poll_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    cfg = RunnerConfig()
    retry_limit = args.retry_limit if args.retry_limit is not None else cfg.poll_retry_limit
    interval = args.interval if args.interval is not None else cfg.poll_interval_seconds
    path = get_absolute_path(args.path)

    try:
        asyncio.run(wait_for_file(path, retry_limit=retry_limit, interval_seconds=interval))
        formatter.success({"path": str(path), "exists": True}, f"{path} exists")
        return 0

    except RetryExhaustedError as e:
        formatter.error(e, error_code="not_ready")
        return 1
