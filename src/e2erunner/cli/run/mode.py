"""
e2erunner run mode command.

SUMMARY: Show which test suites the current mode enables
"""

from __future__ import annotations

import argparse

from e2erunner.cli import OutputFormatter, add_json_flag
from e2erunner.core.config.domains import RunnerConfig

SUMMARY = "Show which test suites the current mode enables"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        cfg = RunnerConfig()
        data = {
            "mode_env": cfg.mode_env,
            "mode": cfg.mode,
            "unit": cfg.should_run_unit_test(),
            "e2e": cfg.should_run_e2e_test(),
        }
        message = (
            f"{cfg.mode_env}={cfg.mode or '(unset)'}\n"
            f"  unit: {'yes' if data['unit'] else 'no'}\n"
            f"  e2e: {'yes' if data['e2e'] else 'no'}"
        )
        formatter.success(data, message)
        return 0

    except Exception as e:
        formatter.error(e, error_code="run_mode_error")
        return 1
