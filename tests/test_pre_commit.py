"""Tests for the git pre-commit hook."""

import os
import subprocess
import sys

import pytest

from clarity_xtask.errors import XtaskError
from clarity_xtask.pre_commit import install_hook, invoked_as_hook, run_hook


@pytest.fixture()
def hooks_dir(project):
    path = project / ".git" / "hooks"
    path.mkdir(parents=True)
    return path


# ---------------------------------------------------------------------------
# invoked_as_hook
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "argv0,expected",
    [
        (".git/hooks/pre-commit", True),
        ("/repo/.git/hooks/pre-commit", True),
        ("pre-commit.exe", True),
        ("/usr/local/bin/xtask", False),
        ("/home/me/pre-commit-tools/xtask", False),
        ("", False),
    ],
)
def test_invoked_as_hook(argv0, expected):
    assert invoked_as_hook(argv0) is expected


# ---------------------------------------------------------------------------
# install_hook
# ---------------------------------------------------------------------------


def test_install_hook_writes_script(hooks_dir):
    install_hook()

    hook = hooks_dir / "pre-commit"
    content = hook.read_text()
    assert content.startswith(f"#!{sys.executable}\n")
    assert "from clarity_xtask.cli import main" in content


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_install_hook_is_executable(hooks_dir):
    install_hook()
    assert os.access(hooks_dir / "pre-commit", os.X_OK)


def test_install_hook_refuses_to_overwrite(hooks_dir):
    existing = hooks_dir / "pre-commit"
    existing.write_text("#!/bin/sh\necho custom\n")

    with pytest.raises(XtaskError, match="already created"):
        install_hook()

    assert existing.read_text() == "#!/bin/sh\necho custom\n"


def test_install_hook_rejects_interpreter_path_with_spaces(hooks_dir, monkeypatch):
    monkeypatch.setattr(sys, "executable", "/Applications/My Python/bin/python3")

    with pytest.raises(XtaskError, match="whitespace"):
        install_hook()

    assert not (hooks_dir / "pre-commit").exists()


def test_install_hook_uses_given_root(tmp_path, hooks_dir):
    other = tmp_path / "other"
    (other / ".git" / "hooks").mkdir(parents=True)

    install_hook(other)

    assert (other / ".git" / "hooks" / "pre-commit").is_file()
    assert not (hooks_dir / "pre-commit").exists()


def test_install_hook_outside_git_checkout(project):
    with pytest.raises(XtaskError, match="git checkout"):
        install_hook()


@pytest.mark.integration
def test_install_hook_in_real_repo(project):
    subprocess.run(["git", "init", "-q", str(project)], check=True)

    install_hook()

    assert (project / ".git" / "hooks" / "pre-commit").is_file()


# ---------------------------------------------------------------------------
# run_hook
# ---------------------------------------------------------------------------


def test_run_hook_formats_then_restages(project, fake_run):
    fake_run.respond(
        ["git", "diff"], stdout="crates/clarity_ide/src/lib.rs\nxtask.toml\n"
    )

    run_hook()

    fmt = fake_run.calls[0]
    assert fmt[:3] == ["cargo", "fmt", "--all"]
    assert ["git", "diff", "--diff-filter=MAR", "--name-only", "--cached"] in fake_run.calls

    update_index = [cmd for cmd in fake_run.calls if cmd[1:2] == ["update-index"]]
    assert update_index == [
        ["git", "update-index", "--add", str(project / "crates/clarity_ide/src/lib.rs")],
        ["git", "update-index", "--add", str(project / "xtask.toml")],
    ]


def test_run_hook_nothing_staged(project, fake_run):
    run_hook()
    assert not any(cmd[1:2] == ["update-index"] for cmd in fake_run.calls)


def test_run_hook_fmt_failure_stops(project, fake_run):
    fake_run.respond(["cargo", "fmt"], returncode=1)

    with pytest.raises(XtaskError):
        run_hook()

    assert fake_run.commands("git") == []
