"""Launching shell commands whose pid is known before they become ready.

``start_tracked_process`` hands the pid to ``on_spawn`` immediately after the
process starts, then streams combined stdout/stderr to the log until the
readiness predicate matches a chunk of output or the process exits. Output
produced after readiness keeps draining in a background task so the child
never blocks on a full pipe.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Deque, Dict, Optional, Union

from e2erunner.core.exceptions import SpawnError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 65536

ReadyPredicate = Callable[[str], bool]


@dataclass
class TrackedProcess:
    name: str
    command: str
    process_key: str
    process: asyncio.subprocess.Process
    ready: bool = False
    output: Deque[str] = field(default_factory=lambda: deque(maxlen=200))
    _drain_task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    async def wait(self) -> int:
        """Wait for exit and for the remaining output to drain."""
        code = await self.process.wait()
        if self._drain_task is not None:
            await self._drain_task
        return code

    def tail(self, lines: int = 20) -> str:
        return "\n".join(list(self.output)[-lines:])


def _as_predicate(ready_when: Union[ReadyPredicate, str, None]) -> Optional[ReadyPredicate]:
    if ready_when is None or callable(ready_when):
        return ready_when
    marker = str(ready_when)
    return lambda chunk: marker in chunk


def _emit(handle: TrackedProcess, out_logger: logging.Logger, text: str, level: int) -> None:
    for line in text.splitlines():
        if not line.strip():
            continue
        handle.output.append(line)
        out_logger.log(level, line)


async def _read_until_ready(
    handle: TrackedProcess,
    predicate: Optional[ReadyPredicate],
    out_logger: logging.Logger,
) -> None:
    stream = handle.process.stdout
    assert stream is not None
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        text = chunk.decode("utf-8", errors="replace")
        _emit(handle, out_logger, text, logging.INFO)
        if predicate is not None and predicate(text):
            handle.ready = True
            return


async def _drain(handle: TrackedProcess, out_logger: logging.Logger) -> None:
    stream = handle.process.stdout
    assert stream is not None
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        _emit(handle, out_logger, chunk.decode("utf-8", errors="replace"), logging.DEBUG)
    code = await handle.process.wait()
    logger.info("[%s] exited with code %s", handle.name, code)


async def start_tracked_process(
    name: str,
    command: str,
    *,
    on_spawn: Callable[[int], Awaitable[None]],
    process_key: str = "",
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
    ready_when: Union[ReadyPredicate, str, None] = None,
    timeout_seconds: float = 600.0,
    output_tail_lines: int = 200,
) -> TrackedProcess:
    """Start ``command`` in a shell and wait until it is ready or has exited.

    Args:
        name: Slot name, also used for the output logger.
        command: Shell command line.
        on_spawn: Awaited with the pid as soon as the process exists, before
            any output is read.
        process_key: Traceability tag stored on the handle.
        cwd: Working directory.
        env: Extra environment variables layered over ``os.environ``.
        ready_when: Predicate over output chunks (or a substring to look for).
            Without one, the call waits for the process to exit.
        timeout_seconds: Upper bound for the wait.

    Raises:
        SpawnError: The process exited non-zero before becoming ready, or the
            wait timed out. A timed-out process keeps running; it is recorded
            and will be killed by cleanup.
    """
    merged_env = dict(os.environ)
    merged_env.update(env or {})
    predicate = _as_predicate(ready_when)
    out_logger = logging.getLogger(f"e2erunner.process.{name}")

    logger.info("[%s] running: %s", name, command)
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        cwd=str(cwd) if cwd is not None else None,
        env=merged_env,
        start_new_session=True,
    )
    handle = TrackedProcess(
        name=name,
        command=command,
        process_key=process_key,
        process=proc,
        output=deque(maxlen=max(1, output_tail_lines)),
    )

    try:
        await on_spawn(proc.pid)
    except Exception:
        # Unrecorded processes would never be cleaned up.
        with contextlib.suppress(ProcessLookupError):
            os.killpg(proc.pid, signal.SIGKILL)
        await proc.wait()
        raise

    context = {"name": name, "command": command, "pid": proc.pid}
    try:
        await asyncio.wait_for(_read_until_ready(handle, predicate, out_logger), timeout_seconds)
    except asyncio.TimeoutError:
        raise SpawnError(
            f"{name} did not become ready within {timeout_seconds}s",
            context={**context, "output": handle.tail()},
        ) from None

    if handle.ready:
        logger.info("[%s] ready (pid %s)", name, proc.pid)
        handle._drain_task = asyncio.create_task(_drain(handle, out_logger))
        return handle

    code = await proc.wait()
    if code != 0:
        raise SpawnError(
            f"{name} exited with code {code}",
            context={**context, "returncode": code, "output": handle.tail()},
        )
    logger.info("[%s] finished", name)
    return handle


__all__ = ["ReadyPredicate", "TrackedProcess", "start_tracked_process"]
