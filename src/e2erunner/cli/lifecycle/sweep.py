"""
e2erunner lifecycle sweep command.

SUMMARY: Clean expired runs left behind by crashed or abandoned runners
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_dry_run_flag, add_json_flag, add_store_flag, get_store
from e2erunner.core.config.domains import LifecycleConfig
from e2erunner.core.lifecycle import clean_all, clean_target, find_expired_runs

SUMMARY = "Clean expired runs left behind by crashed or abandoned runners"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--run-id",
        type=str,
        help="Also clean this run first, whatever its age",
    )
    parser.add_argument(
        "--max-age",
        type=float,
        default=None,
        help="Seconds after which a run is expired (default: lifecycle.expire_after_seconds)",
    )
    add_dry_run_flag(parser)
    add_store_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        store = get_store(args)
        max_age = args.max_age if args.max_age is not None else LifecycleConfig().expire_after_seconds

        if args.dry_run:
            expired = find_expired_runs(store, expire_after_seconds=max_age)
            formatter.success(
                {"dry_run": True, "expired": expired, "max_age_seconds": max_age},
                f"Found {len(expired)} expired run(s) (age > {max_age:g}s)"
                + "".join(f"\n  {run_id}" for run_id in expired),
            )
            return 0

        if args.run_id:
            reports = clean_all(store, args.run_id, expire_after_seconds=max_age)
        else:
            reports = [
                clean_target(store, run_id)
                for run_id in find_expired_runs(store, expire_after_seconds=max_age)
            ]

        cleaned = [r.run_id for r in reports if r.removed]
        formatter.success(
            {"cleaned": cleaned, "reports": [r.to_dict() for r in reports]},
            f"Cleaned {len(cleaned)} run(s)" + "".join(f"\n  {run_id}" for run_id in cleaned),
        )
        return 0

    except Exception as e:
        formatter.error(e, error_code="lifecycle_sweep_error")
        return 1
