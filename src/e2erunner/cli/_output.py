"""Output helpers shared by every e2erunner command.

With ``--json`` a command prints exactly one JSON document: results go to
stdout and errors to stderr. Without it, results are printed as plain
text lines.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from e2erunner.core.exceptions import E2ERunnerError


class OutputFormatter:
    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, payload: Any, stream=None) -> None:
        print(json.dumps(payload, indent=self.indent, default=str), file=stream or sys.stdout)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``{"status": ..., **data}`` in JSON mode, ``message`` otherwise."""
        if self.json_mode:
            self._dump({"status": status, **data})
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Report ``error`` on stderr.

        The JSON payload is the error's ``to_json_error()`` (with its
        ``context``: attempt counts, ports, pids) for e2erunner errors. ``error``
        is replaced by the command's short machine code, and ``type`` keeps
        the exception class name.
        """
        msg = message or str(error)
        if not self.json_mode:
            print(f"Error: {msg}", file=sys.stderr)
            return
        if isinstance(error, E2ERunnerError):
            payload: Dict[str, Any] = error.to_json_error()
        else:
            payload = {"error": type(error).__name__, "message": str(error)}
        payload.update(type=payload["error"], error=error_code, message=msg)
        self._dump(payload, sys.stderr)

    def json_output(self, data: Any) -> None:
        self._dump(data)

    def text(self, message: str) -> None:
        print(message)


__all__ = ["OutputFormatter"]
