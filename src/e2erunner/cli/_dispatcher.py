"""
Command-line entry point: ``e2erunner <domain> <command> [options]``.

Domains are the subpackages of ``e2erunner.cli`` (``lifecycle``, ``port``,
``run``, ``wait``) and every public module inside one is a command. A command
module provides ``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``;
dropping a new module into a domain folder is enough to expose it.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, NamedTuple, Optional

from e2erunner.core.stdlib_logging import configure_logging

logger = logging.getLogger(__name__)

CLI_DIR = Path(__file__).parent


class Command(NamedTuple):
    module: ModuleType
    summary: str
    register_args: Optional[Callable[[argparse.ArgumentParser], None]]
    main: Optional[Callable[[argparse.Namespace], int]]


def _is_command_file(path: Path) -> bool:
    return path.suffix == ".py" and not path.name.startswith("_")


@lru_cache(maxsize=1)
def discover_domains() -> Dict[str, Path]:
    """Map domain name to its folder, for folders holding at least one command."""
    return {
        d.name: d
        for d in sorted(CLI_DIR.iterdir())
        if d.is_dir() and not d.name.startswith("_") and any(map(_is_command_file, d.iterdir()))
    }


@lru_cache(maxsize=None)
def discover_commands(domain: str) -> Dict[str, Command]:
    """Import every command module of ``domain``.

    A module that fails to import is reported on stderr and left out, so one
    broken command does not take the whole CLI down.
    """
    commands: Dict[str, Command] = {}
    for path in sorted((CLI_DIR / domain).glob("*.py")):
        if not _is_command_file(path):
            continue
        try:
            module = importlib.import_module(f"e2erunner.cli.{domain}.{path.stem}")
        except ImportError as exc:
            print(f"Warning: could not load command {domain} {path.stem}: {exc}", file=sys.stderr)
            continue
        commands[path.stem] = Command(
            module=module,
            summary=getattr(module, "SUMMARY", f"{domain} {path.stem}"),
            register_args=getattr(module, "register_args", None),
            main=getattr(module, "main", None),
        )
    return commands


def _version() -> str:
    from e2erunner import __version__

    return __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="e2erunner",
        description="Track, reuse and clean up the processes and ports of e2e test runs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument("--log-level", help="Override logging.level for this invocation")

    domains = parser.add_subparsers(dest="domain", title="domains", metavar="<domain>")
    for domain, _path in discover_domains().items():
        commands = discover_commands(domain)
        if not commands:
            continue
        domain_parser = domains.add_parser(domain, help=f"{domain} commands")
        domain_parser.set_defaults(_domain_parser=domain_parser)
        sub = domain_parser.add_subparsers(dest="command", title="commands", metavar="<command>")
        for name, command in commands.items():
            dashed = name.replace("_", "-")
            cmd_parser = sub.add_parser(
                dashed, aliases=[name] if dashed != name else [], help=command.summary
            )
            if command.register_args is not None:
                command.register_args(cmd_parser)
            if command.main is not None:
                cmd_parser.set_defaults(_func=command.main)
    return parser


def main(argv: Optional[list] = None) -> int:
    """Run one command and return its exit code.

    Exit codes: whatever the command returns, 1 for an unexpected error and
    130 when interrupted.
    """
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))

    func = getattr(args, "_func", None)
    if func is None:
        (getattr(args, "_domain_parser", None) or parser).print_help()
        return 0

    try:
        # stdout carries exactly one JSON document in --json mode.
        configure_logging(level=args.log_level, stream=not getattr(args, "json", False))
        return int(func(args) or 0)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as exc:
        logger.debug("%s %s failed", args.domain, args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
