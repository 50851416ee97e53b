"""Run orchestrator.

``E2ERunner`` owns one run identifier and wraps every command and port claim
of a test run so they end up in the lifecycle registry. ``start()`` and
``stop()`` both run the cleanup protocol, so resources leaked by this run or
by crashed earlier runs are reclaimed.

Typical use::

    runner = E2ERunner(output_path="out", workspace_path=".")
    await runner.start()
    port = await runner.use_port("mockstar-start", "mockstar")
    await runner.run_command(
        "mockstar-start",
        f"npx mockstar run -p {port}",
        ready_when=f"127.0.0.1:{port}",
    )
    ...
    await runner.stop()
"""
from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from urllib.parse import quote

from e2erunner import __version__
from e2erunner.core.config.domains import PortsConfig, RunnerConfig, parse_port
from e2erunner.core.exceptions import ConfigError
from e2erunner.core.lifecycle import CleanupReport, LifecycleRegistry, clean_all
from e2erunner.core.lifecycle.cleanup import Killer
from e2erunner.core.ports import find_available_port
from e2erunner.core.process import KillOutcome, ProcessKiller, exit_after
from e2erunner.core.resilience import wait_for_file, wait_for_url
from e2erunner.core.run import new_run_id, now_ms
from e2erunner.core.utils.io import PathLike, write_json_atomic
from e2erunner.core.utils.merge import deep_merge
from e2erunner.core.utils.paths import get_absolute_path

from .spawn import ReadyPredicate, TrackedProcess, start_tracked_process

logger = logging.getLogger(__name__)

CommandSource = Union[str, Callable[..., str]]


def get_from_str_or_func(target: CommandSource, *args: Any) -> str:
    """Return ``target`` itself, or the result of calling it with ``args``."""
    return target(*args) if callable(target) else target


@dataclass(frozen=True)
class ProcessCommand:
    """One entry of the runner's process log."""

    name: str
    command: str
    process_key: str
    started_at: int
    pid: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "command": self.command,
            "processKey": self.process_key,
            "startedAt": self.started_at,
            "pid": self.pid,
        }


class E2ERunner:
    """Orchestrates the processes and ports of one end-to-end test run."""

    def __init__(
        self,
        output_path: Optional[PathLike],
        workspace_path: Optional[PathLike],
        *,
        is_dev: bool = False,
        npm_runner: Optional[str] = None,
        registry: Optional[LifecycleRegistry] = None,
        killer: Optional[Killer] = None,
        runner_config: Optional[RunnerConfig] = None,
        ports_config: Optional[PortsConfig] = None,
    ) -> None:
        if not output_path:
            raise ConfigError("output_path is required", context={"output_path": output_path})
        if not workspace_path or not Path(workspace_path).expanduser().is_dir():
            raise ConfigError(
                f"workspace_path does not exist: {workspace_path}",
                context={"workspace_path": str(workspace_path) if workspace_path else None},
            )

        self.output_path = get_absolute_path(output_path)
        self.workspace_path = get_absolute_path(workspace_path)
        self.is_dev = bool(is_dev)
        self.run_id = new_run_id(self.output_path, self.is_dev)

        self.config = runner_config if runner_config is not None else RunnerConfig()
        self.ports_config = ports_config if ports_config is not None else PortsConfig()
        self.registry = registry if registry is not None else LifecycleRegistry()
        self.killer: Killer = killer if killer is not None else ProcessKiller.from_config()
        self.npm_runner = npm_runner

        self.started_at = now_ms()
        self._cache_data: Dict[str, Any] = {"output_path": str(self.output_path)}
        self._process_log: List[ProcessCommand] = []
        self._processes: Dict[str, TrackedProcess] = {}

    def __repr__(self) -> str:
        return f"E2ERunner(run_id={self.run_id!r}, output_path={str(self.output_path)!r})"

    # ========== Lifecycle ==========

    async def start(self) -> None:
        """Reset the output directory and reclaim leftovers from earlier runs."""
        logger.info("Starting e2e run %s (e2erunner %s)", self.run_id, __version__)
        logger.info("Clearing output directory %s", self.output_path)
        await asyncio.to_thread(shutil.rmtree, self.output_path, ignore_errors=True)

        if not self.npm_runner:
            self.npm_runner = self.config.npm_runner
        logger.info("Using %s", self.npm_runner)

        await self.clean()

    async def clean(self) -> List[CleanupReport]:
        """Clean this run and sweep expired runs."""
        logger.info("Cleaning up run %s", self.run_id)
        return await asyncio.to_thread(clean_all, self.registry.store, self.run_id, killer=self.killer)

    async def run_before_stop(self) -> None:
        """Hook for subclasses: runs after the snapshot and before cleanup."""

    async def stop(self, *, skip_exit: bool = False) -> List[CleanupReport]:
        """Snapshot state, run the stop hook, clean up, then exit unless ``skip_exit``.

        Failures in any teardown step are logged and never keep the process
        from exiting.
        """
        snapshot_path = self.output_path / self.config.snapshot_file
        try:
            snapshot = await asyncio.to_thread(self.snapshot)
            await asyncio.to_thread(write_json_atomic, snapshot_path, snapshot)
        except Exception as exc:
            logger.error("Could not write run snapshot %s: %s", snapshot_path, exc)

        try:
            await self.run_before_stop()
        except Exception:
            logger.exception("Stop hook of run %s failed", self.run_id)

        reports: List[CleanupReport] = []
        try:
            reports = await self.clean()
        except Exception as exc:
            logger.error("Cleanup of run %s failed: %s", self.run_id, exc)

        logger.info("Run %s took %.3fs", self.run_id, self.get_total_cost() / 1000)
        if not skip_exit:
            await exit_after(self.config.exit_delay_seconds, reason=f"run {self.run_id} stopped")
        return reports

    # ========== Processes ==========

    def process_key(self, name: str) -> str:
        return f"{quote(name, safe='')}-{self.run_id}"

    async def run_command(
        self,
        name: str,
        command: CommandSource,
        *,
        port: Optional[int] = None,
        cwd: Optional[PathLike] = None,
        env: Optional[Dict[str, str]] = None,
        ready_when: Union[ReadyPredicate, str, None] = None,
        timeout_seconds: Optional[float] = None,
    ) -> TrackedProcess:
        """Run ``command`` as slot ``name`` of this run.

        The pid is recorded before readiness is awaited, so a crash or
        timeout while waiting still leaves the process reclaimable.
        ``command`` may be a callable; it is called with ``port`` when given.
        """
        cmd = get_from_str_or_func(command, port) if port is not None else get_from_str_or_func(command)
        process_key = self.process_key(name)
        entry = ProcessCommand(name=name, command=cmd, process_key=process_key, started_at=now_ms())
        self._process_log.append(entry)
        index = len(self._process_log) - 1

        async def _on_spawn(pid: int) -> None:
            self._process_log[index] = replace(entry, pid=pid)
            await asyncio.to_thread(self.registry.record_pid, name, pid, self.run_id, cmd)

        handle = await start_tracked_process(
            name,
            cmd,
            on_spawn=_on_spawn,
            process_key=process_key,
            cwd=cwd if cwd is not None else self.workspace_path,
            env=env,
            ready_when=ready_when,
            timeout_seconds=timeout_seconds if timeout_seconds is not None else self.config.spawn_timeout_seconds,
            output_tail_lines=self.config.output_tail_lines,
        )
        self._processes[name] = handle
        return handle

    def get_process(self, name: str) -> Optional[TrackedProcess]:
        return self._processes.get(name)

    # ========== Ports ==========

    async def find_available_port(
        self, start: Optional[int] = None, skip: Optional[Iterable[int]] = None
    ) -> int:
        """First free port at/after ``start`` that no recorded run has claimed."""
        excluded = set(skip or ())
        excluded.update(await asyncio.to_thread(self.registry.list_claimed_ports))
        return await asyncio.to_thread(
            find_available_port,
            start or self.ports_config.default_start,
            excluded,
            max_port=self.ports_config.max_port,
            host=self.ports_config.host,
        )

    async def kill_port(self, ports: Union[int, Iterable[int]]) -> List[KillOutcome]:
        return await asyncio.to_thread(self.killer.kill_ports, [ports] if isinstance(ports, int) else list(ports))

    async def use_port(
        self,
        name: str,
        kind: str,
        port: Optional[int] = None,
        *,
        description: str = "",
    ) -> int:
        """Claim a port for slot ``name``.

        Precedence: the kind's environment variable, then ``port``. A pinned
        port is evicted (its occupant killed) before being claimed; without
        one, the next free port at or above the kind's floor is used.
        """
        port_kind = self.ports_config.kind(kind)
        override = port_kind.env_override()
        chosen = override if override is not None else port

        if chosen is not None:
            chosen = parse_port(chosen, source=f"{kind} port")
            logger.info("%s uses pinned port %s; evicting its current occupant", name, chosen)
            await self.kill_port(chosen)
        else:
            chosen = await self.find_available_port(port_kind.floor)
            logger.info("%s allocated port %s", name, chosen)

        await asyncio.to_thread(self.registry.record_port, name, chosen, self.run_id, description)
        return chosen

    # ========== Readiness ==========

    async def wait_for_url(self, url: str, *, retry_limit: Optional[int] = None, debug: bool = False) -> bool:
        return await wait_for_url(
            url,
            retry_limit=self.config.poll_retry_limit if retry_limit is None else retry_limit,
            interval_seconds=self.config.poll_interval_seconds,
            timeout_seconds=self.config.http_timeout_seconds,
            debug=debug,
        )

    async def wait_for_file(self, path: PathLike, *, retry_limit: Optional[int] = None) -> bool:
        return await wait_for_file(
            get_absolute_path(path, self.workspace_path),
            retry_limit=self.config.poll_retry_limit if retry_limit is None else retry_limit,
            interval_seconds=self.config.poll_interval_seconds,
        )

    # ========== Bookkeeping ==========

    def should_run_unit_test(self, is_run: Optional[bool] = None) -> bool:
        return self.config.should_run_unit_test(is_run)

    def should_run_e2e_test(self, is_run: Optional[bool] = None) -> bool:
        return self.config.should_run_e2e_test(is_run)

    def add_cache_data(self, data: Dict[str, Any]) -> None:
        """Deep-merge ``data`` into the run's cache data."""
        self._cache_data = deep_merge(self._cache_data, data or {})

    def get_cache_data(self) -> Dict[str, Any]:
        return self._cache_data

    def get_process_log(self) -> List[ProcessCommand]:
        return list(self._process_log)

    def get_total_cost(self) -> int:
        """Milliseconds elapsed since the runner was created."""
        return now_ms() - self.started_at

    def snapshot(self) -> Dict[str, Any]:
        entry = self.registry.get_entry(self.run_id)
        return {
            "runId": self.run_id,
            "isDev": self.is_dev,
            "outputPath": str(self.output_path),
            "workspacePath": str(self.workspace_path),
            "npmRunner": self.npm_runner,
            "startedAt": self.started_at,
            "totalCost": self.get_total_cost(),
            "cacheData": self._cache_data,
            "processes": [p.to_dict() for p in self._process_log],
            "registry": entry.to_dict() if entry is not None else None,
        }


__all__ = ["CommandSource", "E2ERunner", "ProcessCommand", "get_from_str_or_func"]
