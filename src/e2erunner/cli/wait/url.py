"""
e2erunner wait url command.

SUMMARY: Poll a URL until it answers with a non-error status
"""

from __future__ import annotations

import argparse
import asyncio

from e2erunner.cli import OutputFormatter, add_json_flag, add_poll_flags
from e2erunner.core.config.domains import RunnerConfig
from e2erunner.core.exceptions import RetryExhaustedError
from e2erunner.core.resilience import wait_for_url

SUMMARY = "Poll a URL until it answers with a non-error status"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("url", help="URL to poll with GET")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log the head of each response body",
    )
    add_poll_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    cfg = RunnerConfig()
    retry_limit = args.retry_limit if args.retry_limit is not None else cfg.poll_retry_limit
    interval = args.interval if args.interval is not None else cfg.poll_interval_seconds

    try:
        asyncio.run(
            wait_for_url(
                args.url,
                retry_limit=retry_limit,
                interval_seconds=interval,
                timeout_seconds=cfg.http_timeout_seconds,
                debug=args.debug,
            )
        )
        formatter.success({"url": args.url, "ready": True}, f"{args.url} is ready")
        return 0

    except RetryExhaustedError as e:
        formatter.error(e, error_code="not_ready")
        return 1
    except Exception as e:
        formatter.error(e, error_code="wait_url_error")
        return 1
