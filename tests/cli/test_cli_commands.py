"""End-to-end tests for the e2erunner CLI dispatcher and commands."""
from __future__ import annotations

import json
import socket
from pathlib import Path

import pytest

from e2erunner.cli._dispatcher import build_parser, discover_commands, discover_domains, main
from e2erunner.core.lifecycle import LifecycleStore, ResourceRecord, RunEntry


def _run_json(capsys, *argv: str):
    code = main([*argv, "--json"])
    out = capsys.readouterr().out
    return code, json.loads(out)


@pytest.fixture
def cli_store(tmp_path: Path) -> LifecycleStore:
    return LifecycleStore(tmp_path / "cli-lifecycle.yml")


@pytest.mark.fast
class TestDiscovery:
    def test_domains(self) -> None:
        assert set(discover_domains()) == {"lifecycle", "port", "run", "wait"}

    def test_commands(self) -> None:
        assert set(discover_commands("lifecycle")) == {"show", "clean", "sweep"}
        assert set(discover_commands("port")) == {"find", "check", "kill"}
        assert set(discover_commands("wait")) == {"url", "file"}
        assert set(discover_commands("run")) == {"id", "mode"}

    def test_version(self, capsys) -> None:
        from e2erunner import __version__

        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_domain_prints_help(self, capsys) -> None:
        assert main([]) == 0
        assert "domains" in capsys.readouterr().out


@pytest.mark.fast
class TestRunCommands:
    def test_run_id(self, capsys, tmp_path: Path) -> None:
        code, data = _run_json(capsys, "run", "id", "--output-path", str(tmp_path / "out"))

        assert code == 0
        assert data["status"] == "success"
        assert len(data["run_id"]) == 6 + 13

    def test_run_id_dev_text(self, capsys) -> None:
        assert main(["run", "id", "--output-path", "out", "--dev"]) == 0
        assert capsys.readouterr().out.strip() == "dev"

    def test_run_mode(self, capsys, monkeypatch) -> None:
        monkeypatch.setenv("DWT_MODE", "e2e")

        code, data = _run_json(capsys, "run", "mode")

        assert code == 0
        assert data["mode"] == "e2e"
        assert (data["unit"], data["e2e"]) == (False, True)


@pytest.mark.fast
class TestLifecycleCommands:
    def test_show_empty(self, capsys, cli_store: LifecycleStore) -> None:
        code, data = _run_json(capsys, "lifecycle", "show", "--store", str(cli_store.path))

        assert code == 0
        assert data["runs"] == {}

    def test_show_entries_text(self, capsys, cli_store: LifecycleStore) -> None:
        cli_store.save(
            {"r1": RunEntry(resources=[ResourceRecord("mockstar-start", pid=1234, port=9420)], last_touched=1)}
        )

        assert main(["lifecycle", "show", "--store", str(cli_store.path)]) == 0
        out = capsys.readouterr().out
        assert "r1" in out
        assert "mockstar-start pid=1234 port=9420" in out

    def test_clean_unknown_run(self, capsys, cli_store: LifecycleStore) -> None:
        code, data = _run_json(capsys, "lifecycle", "clean", "--run-id", "ghost", "--store", str(cli_store.path))

        assert code == 0
        assert data["found"] is False

    def test_clean_removes_entry(self, capsys, cli_store: LifecycleStore) -> None:
        # A port nobody listens on: the kill is a no-op, the entry still goes.
        with socket.socket() as s:
            s.bind(("127.0.0.1", 0))
            port = s.getsockname()[1]
        cli_store.save({"r1": RunEntry(resources=[ResourceRecord("svc", port=port)], last_touched=1)})

        code, data = _run_json(capsys, "lifecycle", "clean", "--run-id", "r1", "--store", str(cli_store.path))

        assert code == 0
        assert data["removed"] is True
        assert data["outcomes"][0]["status"] == "not_found"
        assert cli_store.load() == {}

    def test_sweep_dry_run_lists_expired(self, capsys, cli_store: LifecycleStore) -> None:
        cli_store.save({"old": RunEntry(last_touched=0), "new": RunEntry(last_touched=10**15)})

        code, data = _run_json(capsys, "lifecycle", "sweep", "--dry-run", "--store", str(cli_store.path))

        assert code == 0
        assert data["expired"] == ["old"]
        assert set(cli_store.load()) == {"old", "new"}

    def test_sweep_removes_expired(self, capsys, cli_store: LifecycleStore) -> None:
        cli_store.save({"old": RunEntry(last_touched=0), "new": RunEntry(last_touched=10**15)})

        code, data = _run_json(capsys, "lifecycle", "sweep", "--store", str(cli_store.path))

        assert code == 0
        assert data["cleaned"] == ["old"]
        assert set(cli_store.load()) == {"new"}


@pytest.mark.integration
class TestPortCommands:
    def test_find_honours_skip(self, capsys) -> None:
        with socket.socket() as s:
            s.bind(("", 0))
            start = s.getsockname()[1]
        if start > 65000:
            pytest.skip("ephemeral port too close to the top of the range")

        code, data = _run_json(capsys, "port", "find", "--start", str(start), "--skip", str(start))

        assert code == 0
        assert data["port"] > start

    def test_check_occupied_port(self, capsys) -> None:
        with socket.socket() as s:
            s.bind(("", 0))
            s.listen(1)
            port = s.getsockname()[1]

            code, data = _run_json(capsys, "port", "check", str(port))

        assert code == 2
        assert data["occupied"] is True

    def test_check_invalid_port(self, capsys) -> None:
        assert main(["port", "check", "99999"]) == 1
        assert "out of range" in capsys.readouterr().err


@pytest.mark.fast
class TestWaitCommands:
    def test_wait_file_exists(self, capsys, tmp_path: Path) -> None:
        target = tmp_path / "ready"
        target.write_text("1")

        code, data = _run_json(capsys, "wait", "file", str(target), "--retry-limit", "0", "--interval", "0")

        assert code == 0
        assert data["exists"] is True

    def test_wait_file_missing(self, capsys, tmp_path: Path) -> None:
        code = main(["wait", "file", str(tmp_path / "never"), "--retry-limit", "1", "--interval", "0", "--json"])

        assert code == 1
        err = json.loads(capsys.readouterr().err)
        assert err["error"] == "not_ready"
        assert err["type"] == "RetryExhaustedError"
        assert err["context"]["attempts"] == 2
