"""
Pytest configuration and shared fixtures.

Marks:
    integration -- requires git on PATH

Tests decorated with this mark are skipped automatically when git is
absent, so the unit test suite always runs cleanly.
"""

import shutil
from unittest.mock import MagicMock, patch

import pytest

from clarity_xtask.project import ROOT_ENV_VAR

_HAVE_GIT = shutil.which("git") is not None


# ---------------------------------------------------------------------------
# Auto-skip via markers
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(config, items):
    for item in items:
        if item.get_closest_marker("integration") and not _HAVE_GIT:
            item.add_marker(pytest.mark.skip(reason="integration deps missing: git"))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class FakeRun:
    """
    Stand-in for subprocess.run. Records every command and answers with
    canned stdout / return codes registered by command prefix.
    """

    def __init__(self):
        self.calls = []
        self._responses = []
        self._hooks = []

    def respond(self, prefix, stdout="", returncode=0):
        self._responses.append((list(prefix), stdout, returncode))

    def on(self, prefix, callback):
        """Call `callback(cmd)` whenever a command starting with `prefix` runs."""
        self._hooks.append((list(prefix), callback))

    def commands(self, program):
        return [cmd for cmd in self.calls if cmd[0] == program]

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        for prefix, callback in self._hooks:
            if cmd[: len(prefix)] == prefix:
                callback(cmd)

        result = MagicMock()
        result.returncode = 0
        result.stdout = ""
        # Latest registration wins.
        for prefix, stdout, returncode in reversed(self._responses):
            if cmd[: len(prefix)] == prefix:
                result.returncode = returncode
                result.stdout = stdout
                break
        return result


@pytest.fixture()
def fake_run():
    fake = FakeRun()
    with patch("subprocess.run", side_effect=fake):
        yield fake


@pytest.fixture()
def project(tmp_path, monkeypatch):
    """A minimal Cargo workspace, registered as the project root."""
    (tmp_path / "Cargo.toml").write_text(
        '[workspace]\nmembers = ["crates/*"]\n', encoding="utf-8"
    )
    monkeypatch.setenv(ROOT_ENV_VAR, str(tmp_path))
    return tmp_path
