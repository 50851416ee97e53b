"""Tests for LifecycleRegistry recording semantics."""
from __future__ import annotations

import pytest

from e2erunner.core.lifecycle import LifecycleRegistry, LifecycleStore


@pytest.mark.fast
class TestRecording:
    def test_pid_and_port_under_same_name_share_one_record(self, registry: LifecycleRegistry) -> None:
        registry.record_pid("mockstar-start", 1234, "r1", "npx mockstar")
        registry.record_port("mockstar-start", 9420, "r1", "npx mockstar")

        entry = registry.get_entry("r1")
        assert len(entry.resources) == 1
        record = entry.resources[0]
        assert (record.name, record.pid, record.port) == ("mockstar-start", 1234, 9420)

    def test_description_is_overwritten(self, registry: LifecycleRegistry) -> None:
        registry.record_pid("app", 1, "r1", "first")
        registry.record_pid("app", 2, "r1", "second")

        record = registry.get_entry("r1").find("app")
        assert record.pid == 2
        assert record.description == "second"

    def test_new_names_append_in_order(self, registry: LifecycleRegistry) -> None:
        registry.record_port("project", 3000, "r1")
        registry.record_port("mockstar", 9420, "r1")
        registry.record_pid("whistle", 55, "r1")

        assert [r.name for r in registry.get_entry("r1").resources] == ["project", "mockstar", "whistle"]

    def test_runs_are_independent(self, registry: LifecycleRegistry) -> None:
        registry.record_pid("app", 1, "r1")
        registry.record_pid("app", 2, "r2")

        assert registry.list_run_ids() == ["r1", "r2"]
        assert registry.get_entry("r1").pids() == [1]
        assert registry.get_entry("r2").pids() == [2]

    def test_every_write_refreshes_last_touched(self, registry: LifecycleRegistry, monkeypatch) -> None:
        import e2erunner.core.lifecycle.registry as registry_mod

        monkeypatch.setattr(registry_mod, "now_ms", lambda: 1000)
        registry.record_pid("app", 1, "r1")
        assert registry.get_entry("r1").last_touched == 1000

        monkeypatch.setattr(registry_mod, "now_ms", lambda: 5000)
        registry.record_port("db", 5432, "r1")
        assert registry.get_entry("r1").last_touched == 5000

    def test_writes_are_visible_to_a_second_registry(self, store: LifecycleStore) -> None:
        LifecycleRegistry(store).record_pid("app", 10, "r1")
        other = LifecycleRegistry(LifecycleStore(store.path))

        other.record_port("app", 3000, "r1")

        record = LifecycleRegistry(store).get_entry("r1").find("app")
        assert (record.pid, record.port) == (10, 3000)


@pytest.mark.fast
class TestQueries:
    def test_unknown_run_has_no_entry(self, registry: LifecycleRegistry) -> None:
        assert registry.get_entry("missing") is None

    def test_claimed_ports_span_all_runs(self, registry: LifecycleRegistry) -> None:
        registry.record_port("project", 3000, "r1")
        registry.record_port("mockstar", 9420, "r2")
        registry.record_pid("worker", 77, "r2")

        assert registry.list_claimed_ports() == {3000, 9420}

    def test_snapshot_is_plain_data(self, registry: LifecycleRegistry) -> None:
        registry.record_port("project", 3000, "r1", "npm start")

        snap = registry.snapshot()

        assert snap["r1"]["resources"] == [{"name": "project", "port": 3000, "description": "npm start"}]
        assert isinstance(snap["r1"]["lastTouched"], int)
