import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'e2erunner'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_e2erunner_caches

# Per-run switches read straight from the environment. A developer shell that
# exports any of these would silently change port allocation or test gating.
_RUN_ENV_KEYS = [
    "DWT_MODE",
    "PROJECT_PORT",
    "MOCKSTAR_PORT",
    "WHISTLE_PORT",
]


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path, monkeypatch) -> Path:
    """Point the user directory (lifecycle store, config overlays) at tmp_path.

    Every test gets its own store; nothing is ever written to ~/.e2erunner.
    """
    user_dir = tmp_path / "e2erunner-home"
    monkeypatch.setenv("E2ERUNNER_paths__user_config_dir", str(user_dir))
    for key in list(os.environ):
        if key.startswith("E2ERUNNER_") and key != "E2ERUNNER_paths__user_config_dir":
            monkeypatch.delenv(key, raising=False)
    for key in _RUN_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    reset_e2erunner_caches()
    yield user_dir
    reset_e2erunner_caches()


@pytest.fixture
def user_config_dir(isolated_user_dir: Path) -> Path:
    """User overlay directory (<user dir>/config), created on demand."""
    d = isolated_user_dir / "config"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture
def store(tmp_path):
    """A lifecycle store backed by a private file."""
    from e2erunner.core.lifecycle import LifecycleStore

    return LifecycleStore(tmp_path / "lifecycle.yml")


@pytest.fixture
def registry(store):
    from e2erunner.core.lifecycle import LifecycleRegistry

    return LifecycleRegistry(store)


@pytest.fixture
def recording_killer():
    from helpers.killers import RecordingKiller

    return RecordingKiller()
