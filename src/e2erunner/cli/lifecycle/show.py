"""
e2erunner lifecycle show command.

SUMMARY: Show recorded runs, processes and ports
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag, add_store_flag, get_store
from e2erunner.core.lifecycle import LifecycleRegistry
from e2erunner.core.run import now_ms

SUMMARY = "Show recorded runs, processes and ports"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--run-id",
        type=str,
        help="Only show this run",
    )
    add_store_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        store = get_store(args)
        runs = LifecycleRegistry(store).snapshot()
        if args.run_id:
            runs = {k: v for k, v in runs.items() if k == args.run_id}

        if formatter.json_mode:
            formatter.json_output({"store": str(store.path), "runs": runs})
            return 0

        if not runs:
            formatter.text(f"No recorded runs in {store.path}")
            return 0

        now = now_ms()
        lines = [f"Store: {store.path}"]
        for run_id, entry in runs.items():
            age_s = max(0, now - int(entry.get("lastTouched") or 0)) // 1000
            lines.append(f"{run_id} (touched {age_s}s ago)")
            for res in entry.get("resources") or []:
                parts = [f"  - {res.get('name')}"]
                if res.get("pid") is not None:
                    parts.append(f"pid={res['pid']}")
                if res.get("port") is not None:
                    parts.append(f"port={res['port']}")
                if res.get("description"):
                    parts.append(f"({res['description']})")
                lines.append(" ".join(parts))
        formatter.text("\n".join(lines))
        return 0

    except Exception as e:
        formatter.error(e, error_code="lifecycle_show_error")
        return 1
