"""
Git pre-commit hook.

install_hook() writes .git/hooks/pre-commit, a small Python script that
calls back into clarity_xtask.cli.main(). The dispatcher recognises the
hook by the name it was invoked under and calls run_hook() instead of
parsing a subcommand.

Hook behaviour:
    cargo fmt over the workspace, then re-stage every staged file so the
    formatting fixes land in the commit.
"""

import sys
from pathlib import Path
from string import Template

from clarity_xtask.errors import XtaskError
from clarity_xtask.project import project_root
from clarity_xtask.shell import run

_HOOK_NAME = "pre-commit"
_HOOK_PATH = Path(".git") / "hooks" / _HOOK_NAME
_TEMPLATES_DIR = Path(__file__).parent / "templates"


def invoked_as_hook(argv0: str) -> bool:
    """Return True if the process was started as the git pre-commit hook."""
    return _HOOK_NAME in Path(argv0).name


def install_hook(root: Path | None = None) -> None:
    root = root or project_root()
    hook_path = root / _HOOK_PATH
    if hook_path.exists():
        raise XtaskError("Git hook already created")
    if not hook_path.parent.is_dir():
        raise XtaskError(f"{hook_path.parent} not found; is {root} a git checkout?")
    # A shebang line cannot quote its interpreter path.
    if any(ch.isspace() for ch in sys.executable):
        raise XtaskError(
            f"cannot use {sys.executable!r} as the hook interpreter: "
            "the path contains whitespace"
        )

    template_text = (_TEMPLATES_DIR / "pre-commit.py").read_text(encoding="utf-8")
    content = Template(template_text).substitute(python=sys.executable)
    hook_path.write_text(content, encoding="utf-8")
    hook_path.chmod(0o755)
    print(f"Wrote {hook_path}")


def run_hook() -> None:
    root = project_root()
    run(["cargo", "fmt", "--all", "--manifest-path", str(root / "Cargo.toml")])

    diff = run(["git", "diff", "--diff-filter=MAR", "--name-only", "--cached"])
    for line in diff.splitlines():
        if line:
            run(["git", "update-index", "--add", str(root / line)])
