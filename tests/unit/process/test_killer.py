"""Tests for process termination helpers.

These spawn real short-lived Python children and kill them.
"""
from __future__ import annotations

import os
import socket
import subprocess
import sys
import time
import uuid
from typing import Iterator, List

import pytest

from e2erunner.core.process import (
    KillOutcome,
    ProcessKiller,
    find_pids_by_pattern,
    is_process_alive,
    kill_by_pattern,
    kill_pids,
    kill_ports,
)

SLEEPER = "import sys, time; time.sleep(60)"

LISTENER = (
    "import socket, sys, time\n"
    "s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)\n"
    "s.bind(('127.0.0.1', 0))\n"
    "s.listen(1)\n"
    "print(s.getsockname()[1], flush=True)\n"
    "time.sleep(60)\n"
)


@pytest.fixture
def spawn() -> Iterator:
    procs: List[subprocess.Popen] = []

    def _spawn(code: str, *extra: str, **kwargs) -> subprocess.Popen:
        proc = subprocess.Popen([sys.executable, "-c", code, *extra], **kwargs)
        procs.append(proc)
        return proc

    yield _spawn
    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait(timeout=10)


@pytest.mark.fast
class TestKillOutcome:
    def test_not_found_is_success_without_attempt(self) -> None:
        outcome = KillOutcome(1, "pid", "not_found")

        assert outcome.succeeded and not outcome.attempted

    def test_failed_is_attempted_but_not_success(self) -> None:
        outcome = KillOutcome(1, "pid", "failed", (1,), "denied")

        assert outcome.attempted and not outcome.succeeded
        assert outcome.to_dict() == {
            "target": 1,
            "kind": "pid",
            "status": "failed",
            "pids": [1],
            "message": "denied",
        }


@pytest.mark.integration
class TestKillPids:
    def test_kills_running_process(self, spawn) -> None:
        proc = spawn(SLEEPER)

        outcomes = kill_pids(proc.pid, wait_seconds=0)

        assert [o.status for o in outcomes] == ["killed"]
        assert proc.wait(timeout=10) == -9

    def test_vanished_pid_is_not_found(self, spawn) -> None:
        proc = spawn("pass")
        proc.wait(timeout=10)

        outcomes = kill_pids([proc.pid], wait_seconds=0)

        assert outcomes[0].status == "not_found"
        assert outcomes[0].succeeded

    def test_refuses_current_process(self) -> None:
        outcomes = kill_pids(os.getpid(), wait_seconds=0)

        assert outcomes[0].status == "failed"
        assert "current process" in outcomes[0].message

    def test_none_and_empty_are_noops(self) -> None:
        assert kill_pids(None) == []
        assert kill_pids([]) == []

    def test_kills_children_of_the_target(self, spawn) -> None:
        parent = spawn(
            "import subprocess, sys, time\n"
            f"c = subprocess.Popen([sys.executable, '-c', {SLEEPER!r}])\n"
            "print(c.pid, flush=True)\n"
            "time.sleep(60)\n",
            stdout=subprocess.PIPE,
            text=True,
        )
        child_pid = int(parent.stdout.readline().strip())
        assert is_process_alive(child_pid)

        kill_pids(parent.pid, include_children=True, wait_seconds=0)

        assert parent.wait(timeout=10) == -9
        deadline = time.monotonic() + 10
        while is_process_alive(child_pid) and time.monotonic() < deadline:
            time.sleep(0.05)
        assert not is_process_alive(child_pid)


@pytest.mark.integration
class TestKillPorts:
    def test_kills_listener(self, spawn) -> None:
        proc = spawn(LISTENER, stdout=subprocess.PIPE, text=True)
        port = int(proc.stdout.readline().strip())

        outcomes = kill_ports([port], wait_seconds=0)

        assert outcomes[0].kind == "port"
        assert outcomes[0].status == "killed"
        assert proc.pid in outcomes[0].pids
        assert proc.wait(timeout=10) == -9

    def test_free_port_is_not_found(self) -> None:
        with socket.socket() as s:
            s.bind(("127.0.0.1", 0))
            port = s.getsockname()[1]

        outcomes = kill_ports(port, wait_seconds=0)

        assert outcomes[0].status == "not_found"


@pytest.mark.integration
class TestKillByPattern:
    def test_matches_command_line_substring(self, spawn) -> None:
        marker = f"e2erunner-test-{uuid.uuid4().hex}"
        proc = spawn(SLEEPER, marker)
        deadline = time.monotonic() + 10
        while not find_pids_by_pattern(marker) and time.monotonic() < deadline:
            time.sleep(0.05)

        assert find_pids_by_pattern(marker) == [proc.pid]
        outcome = ProcessKiller(wait_seconds=0).kill_by_pattern(marker)

        assert outcome.kind == "pattern"
        assert outcome.status == "killed"
        assert proc.wait(timeout=10) == -9

    def test_no_match_is_not_found(self) -> None:
        outcome = kill_by_pattern(f"no-such-process-{uuid.uuid4().hex}")

        assert outcome.status == "not_found"
        assert outcome.pids == ()

    def test_empty_pattern_matches_nothing(self) -> None:
        assert find_pids_by_pattern("") == []
