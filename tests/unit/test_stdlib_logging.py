"""Tests for configure_logging."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from e2erunner.core.stdlib_logging import configure_logging, is_configured, reset_logging_for_tests


def _ours(root: logging.Logger, before) -> list:
    return [h for h in root.handlers if h not in before]


@pytest.mark.fast
class TestConfigureLogging:
    def test_installs_stream_handler_at_config_level(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)

        configure_logging()

        added = _ours(root, before)
        assert is_configured()
        assert [type(h) for h in added] == [logging.StreamHandler]
        assert root.level == logging.INFO

    def test_reconfigure_replaces_own_handlers(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)

        configure_logging(level="debug")
        configure_logging(level="warning")

        assert len(_ours(root, before)) == 1
        assert root.level == logging.WARNING

    def test_file_handler(self, tmp_path: Path) -> None:
        log_path = tmp_path / "logs" / "run.log"

        configure_logging(log_path=log_path, stream=False)
        logging.getLogger("e2erunner.test").warning("hello file")
        reset_logging_for_tests()

        assert "hello file" in log_path.read_text(encoding="utf-8")

    def test_quiet_mode_installs_null_handler(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)

        configure_logging(stream=False)

        assert [type(h) for h in _ours(root, before)] == [logging.NullHandler]

    def test_level_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("E2ERUNNER_logging__level", "ERROR")

        configure_logging()

        assert logging.getLogger().level == logging.ERROR

    def test_reset_removes_handlers(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        configure_logging()

        reset_logging_for_tests()

        assert _ours(root, before) == []
        assert not is_configured()
