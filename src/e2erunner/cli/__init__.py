"""
e2erunner CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (lifecycle/, port/, wait/, run/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._args import add_dry_run_flag, add_json_flag, add_poll_flags, add_store_flag
from ._output import OutputFormatter
from ._utils import get_store

__all__ = [
    "OutputFormatter",
    "add_dry_run_flag",
    "add_json_flag",
    "add_poll_flags",
    "add_store_flag",
    "get_store",
]
