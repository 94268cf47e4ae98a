"""
Shell-like helpers used by the build tasks.

    run()           -- echo and run a command, return its stdout
    scoped_chdir()  -- change directory for the duration of a with-block
    patched()       -- restore a file's original bytes after a with-block
    rm_rf()         -- remove a file or directory tree if present
    gzip_file()     -- write a gzip-compressed copy of a file
"""

import gzip
import os
import shutil
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path

from clarity_xtask.errors import CommandError, XtaskError

# On native Windows these are .cmd shims -- they need a cmd /c wrapper.
_CMD_SHIMS = {"npm", "npx", "code", "code-insiders", "codium", "code-oss"}


def _platform_cmd(cmd: list) -> list:
    if sys.platform == "win32" and cmd[0] in _CMD_SHIMS:
        return ["cmd", "/c", *cmd]
    return list(cmd)


def run(cmd: list, echo: bool = True, env: dict | None = None) -> str:
    """
    Run `cmd` and return its stripped stdout. stderr is passed through.

    Raises CommandError on a non-zero exit and XtaskError if the program
    cannot be found. `env` entries are added on top of os.environ.
    """
    if echo:
        print(f"$ {' '.join(cmd)}")

    full_env = {**os.environ, **env} if env else None
    try:
        result = subprocess.run(
            _platform_cmd(cmd), stdout=subprocess.PIPE, text=True, env=full_env
        )
    except FileNotFoundError as err:
        raise XtaskError(f"{cmd[0]}: command not found") from err

    if result.returncode != 0:
        raise CommandError(cmd, result.returncode)
    return (result.stdout or "").strip()


@contextmanager
def scoped_chdir(path):
    """
    chdir into `path`, then back to the original directory on exit.

    Failing to enter `path` raises XtaskError before the body runs.
    Failing to return is only reported on stderr.
    """
    original = os.getcwd()
    try:
        os.chdir(path)
    except OSError as err:
        raise XtaskError(f"cannot enter {path}: {err.strerror}") from err

    try:
        yield Path(path)
    finally:
        try:
            os.chdir(original)
        except OSError as err:
            print(
                f"warning: could not return to {original}: {err.strerror}",
                file=sys.stderr,
            )


@contextmanager
def patched(path):
    """Let the body rewrite `path`; its original bytes are put back on exit."""
    path = Path(path)
    original = path.read_bytes()
    try:
        yield path
    finally:
        path.write_bytes(original)


def rm_rf(path) -> None:
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def gzip_file(src, dst) -> None:
    with open(src, "rb") as f_in, gzip.open(dst, "wb", compresslevel=9) as f_out:
        shutil.copyfileobj(f_in, f_out)
