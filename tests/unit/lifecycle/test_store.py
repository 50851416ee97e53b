"""Tests for the on-disk lifecycle store."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from e2erunner.core.exceptions import LifecycleStoreError
from e2erunner.core.lifecycle import LifecycleStore, ResourceRecord, RunEntry


def _entry(*records: ResourceRecord, touched: int = 1000) -> RunEntry:
    return RunEntry(resources=list(records), last_touched=touched)


@pytest.mark.fast
class TestLoad:
    def test_missing_file_loads_empty(self, tmp_path: Path) -> None:
        store = LifecycleStore(tmp_path / "nope" / "lifecycle.yml")

        assert store.load() == {}
        assert not store.path.exists()

    def test_empty_file_loads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text("", encoding="utf-8")

        assert LifecycleStore(path).load() == {}

    def test_corrupt_yaml_loads_empty_and_warns(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text("r1: [unclosed\n  - :\n", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="e2erunner.core.lifecycle.store"):
            assert LifecycleStore(path).load() == {}
        assert "not valid YAML" in caplog.text

    def test_undecodable_bytes_load_empty_and_warn(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_bytes(b"r1:\n  lastTouched: 1\n  resources: []\n\xff\xfe junk\n")

        with caplog.at_level(logging.WARNING, logger="e2erunner.core.lifecycle.store"):
            assert LifecycleStore(path).load() == {}
        assert "not valid YAML" in caplog.text

    def test_non_mapping_document_loads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        assert LifecycleStore(path).load() == {}

    def test_parses_entries(self, tmp_path: Path) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text(
            yaml.safe_dump(
                {
                    "r1": {
                        "lastTouched": 1234,
                        "resources": [
                            {"name": "mockstar-start", "pid": 11, "port": 9420, "description": "mock"},
                            {"name": "whistle", "port": 9421},
                        ],
                    }
                }
            ),
            encoding="utf-8",
        )

        entries = LifecycleStore(path).load()

        assert list(entries) == ["r1"]
        entry = entries["r1"]
        assert entry.last_touched == 1234
        assert entry.pids() == [11]
        assert entry.ports() == [9420, 9421]
        assert entry.find("mockstar-start").description == "mock"

    def test_missing_last_touched_is_zero(self, tmp_path: Path) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text("r1:\n  resources: []\n", encoding="utf-8")

        assert LifecycleStore(path).load()["r1"].last_touched == 0

    def test_malformed_records_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "lifecycle.yml"
        path.write_text(
            "r1:\n  lastTouched: 5\n  resources:\n  - pid: 3\n  - name: ok\n    pid: 4\n"
            "r2: not-a-mapping\n",
            encoding="utf-8",
        )

        entries = LifecycleStore(path).load()

        assert list(entries) == ["r1"]
        assert [r.name for r in entries["r1"].resources] == ["ok"]


@pytest.mark.fast
class TestSave:
    def test_save_none_is_rejected(self, store: LifecycleStore) -> None:
        with pytest.raises(LifecycleStoreError):
            store.save(None)
        assert not store.path.exists()

    def test_save_empty_mapping_writes_empty_document(self, store: LifecycleStore) -> None:
        store.save({})

        assert store.path.exists()
        assert store.load() == {}

    def test_document_layout(self, store: LifecycleStore) -> None:
        store.save({"r1": _entry(ResourceRecord("app", pid=7, port=3000, description="npm start"), touched=42)})

        raw = yaml.safe_load(store.path.read_text(encoding="utf-8"))
        assert raw == {
            "r1": {
                "lastTouched": 42,
                "resources": [{"name": "app", "pid": 7, "port": 3000, "description": "npm start"}],
            }
        }

    def test_save_then_load_preserves_order_of_resources(self, store: LifecycleStore) -> None:
        store.save({"r1": _entry(ResourceRecord("b", pid=2), ResourceRecord("a", port=3001))})

        assert [r.name for r in store.load()["r1"].resources] == ["b", "a"]


@pytest.mark.fast
class TestTransaction:
    def test_mutations_are_saved(self, store: LifecycleStore) -> None:
        with store.transaction() as entries:
            entries["r1"] = _entry(ResourceRecord("app", pid=1))

        assert store.load()["r1"].pids() == [1]

    def test_exception_discards_mutations(self, store: LifecycleStore) -> None:
        store.save({"r1": _entry()})

        with pytest.raises(RuntimeError):
            with store.transaction() as entries:
                entries.pop("r1")
                raise RuntimeError("boom")

        assert "r1" in store.load()

    def test_locked_transaction_uses_sidecar_lock(self, tmp_path: Path) -> None:
        store = LifecycleStore(tmp_path / "lifecycle.yml", lock=True, lock_timeout=1.0, lock_poll_interval=0.01)

        with store.transaction() as entries:
            entries["r1"] = _entry()
            assert (tmp_path / "lifecycle.yml.lock").exists()

        assert "r1" in store.load()


@pytest.mark.fast
class TestFromConfig:
    def test_default_path_lives_in_user_dir(self, isolated_user_dir: Path) -> None:
        store = LifecycleStore.from_config()

        assert store.path == isolated_user_dir.resolve() / "lifecycle.yml"
        assert store.lock is False

    def test_lock_setting_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("E2ERUNNER_lifecycle__lock__enabled", "true")
        from e2erunner.core.config import clear_all_caches

        clear_all_caches()

        assert LifecycleStore.from_config().lock is True
