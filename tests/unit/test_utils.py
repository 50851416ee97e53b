"""Tests for the small I/O, merge and path helpers."""
from __future__ import annotations

import threading
from pathlib import Path

import pytest

from e2erunner.core.utils.io import LockTimeoutError, acquire_file_lock, read_json, write_json_atomic, write_yaml
from e2erunner.core.utils.merge import deep_merge
from e2erunner.core.utils.paths import get_absolute_path, get_user_config_dir


@pytest.mark.fast
class TestMerge:
    def test_deep_merge_does_not_mutate(self) -> None:
        base = {"a": {"b": 1}}

        merged = deep_merge(base, {"a": {"c": 2}})

        assert merged == {"a": {"b": 1, "c": 2}}
        assert base == {"a": {"b": 1}}

    def test_lists_are_replaced(self) -> None:
        assert deep_merge({"k": [1, 2], "n": 1}, {"k": [3]}) == {"k": [3], "n": 1}

    def test_scalar_replaces_mapping(self) -> None:
        assert deep_merge({"a": {"b": 1}}, {"a": None}) == {"a": None}


@pytest.mark.fast
class TestPaths:
    def test_relative_resolves_against_base(self, tmp_path: Path) -> None:
        assert get_absolute_path("a/b", tmp_path) == (tmp_path / "a" / "b").resolve()

    def test_absolute_is_kept(self, tmp_path: Path) -> None:
        assert get_absolute_path(tmp_path / "x", "/elsewhere") == (tmp_path / "x").resolve()

    def test_user_dir_from_env(self, isolated_user_dir: Path) -> None:
        d = get_user_config_dir(create=True)

        assert d == isolated_user_dir.resolve()
        assert d.is_dir()


@pytest.mark.fast
class TestIO:
    def test_json_roundtrip_stringifies_paths(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out.json"

        write_json_atomic(target, {"path": tmp_path, "n": 1})

        assert read_json(target) == {"n": 1, "path": str(tmp_path)}

    def test_read_json_default(self, tmp_path: Path) -> None:
        assert read_json(tmp_path / "missing.json", default={}) == {}
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / "missing.json")

    def test_yaml_keys_are_sorted(self, tmp_path: Path) -> None:
        target = tmp_path / "doc.yml"

        write_yaml(target, {"b": 1, "a": 2})

        assert target.read_text(encoding="utf-8") == "a: 2\nb: 1\n"

    def test_lock_times_out_when_held_elsewhere(self, tmp_path: Path) -> None:
        target = tmp_path / "store.yml"
        held = threading.Event()
        release = threading.Event()

        def holder() -> None:
            with acquire_file_lock(target, timeout=5):
                held.set()
                release.wait(5)

        t = threading.Thread(target=holder)
        t.start()
        try:
            assert held.wait(5)
            with pytest.raises(LockTimeoutError):
                with acquire_file_lock(target, timeout=0.1, poll_interval=0.01):
                    pass
        finally:
            release.set()
            t.join(5)
