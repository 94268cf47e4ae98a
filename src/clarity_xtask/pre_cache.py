"""
Trim target/ before CI saves it to the build cache.

Only third-party build products are worth caching; workspace crates are
rebuilt on every run anyway.
"""

from pathlib import Path

from clarity_xtask.errors import XtaskError
from clarity_xtask.project import project_root
from clarity_xtask.shell import rm_rf

_SLOW_TESTS_COOKIE = ".slow_tests_cookie"
_WORKSPACE_PREFIXES = ("clarity_", "heavy_test")


def run_pre_cache(root: Path | None = None) -> None:
    target = (root or project_root()) / "target"

    cookie = target / _SLOW_TESTS_COOKIE
    if not cookie.exists():
        raise XtaskError("slow tests were skipped on CI!")
    rm_rf(cookie)

    debug = target / "debug"
    if not debug.is_dir():
        raise XtaskError(f"{debug} not found; nothing to prune")
    for entry in debug.iterdir():
        if entry.is_file():
            rm_rf(entry)

    rm_rf(target / ".rustc_info.json")

    removed = 0
    for subdir in (debug / "deps", debug / ".fingerprint"):
        if not subdir.is_dir():
            continue
        for entry in subdir.iterdir():
            if any(prefix in entry.name for prefix in _WORKSPACE_PREFIXES):
                rm_rf(entry)
                removed += 1

    print(f"Pruned {removed} workspace artifacts from {debug}")
