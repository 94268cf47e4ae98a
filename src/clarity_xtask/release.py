"""
Cut a release.

Unless --dry-run is given, the release branch is reset to the nightly tag
and pushed. Then the website checkout (settings["website_root"]) gets:

    thisweek/_posts/<date>-changelog-<N>.adoc   changelog skeleton
    manual.adoc                                 copy of docs/user/readme.adoc
    git.log                                     merges since the last release
"""

import re
import shutil
from datetime import date
from pathlib import Path
from string import Template

from clarity_xtask.errors import XtaskError
from clarity_xtask.project import project_root, read_settings
from clarity_xtask.shell import run

_TEMPLATES_DIR = Path(__file__).parent / "templates"
_RELEASE_TAG = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_release_tag(tag: str) -> bool:
    """Release tags are dates: 2020-02-24."""
    return _RELEASE_TAG.fullmatch(tag) is not None


def _reset_release_branch() -> None:
    run(["git", "switch", "release"])
    run(["git", "fetch", "upstream", "--tags", "--force"])
    run(["git", "reset", "--hard", "tags/nightly"])
    run(["git", "push"])


def write_changelog(changelog_dir: Path, commit: str, today: str) -> Path:
    """Write the next numbered changelog post and return its path."""
    if not changelog_dir.is_dir():
        raise XtaskError(f"{changelog_dir} does not exist; is the website checked out?")

    number = sum(1 for _ in changelog_dir.iterdir())
    template_text = (_TEMPLATES_DIR / "changelog.adoc").read_text(encoding="utf-8")
    content = Template(template_text).substitute(
        number=number, commit=commit, today=today
    )

    path = changelog_dir / f"{today}-changelog-{number}.adoc"
    path.write_text(content, encoding="utf-8")
    print(f"Wrote {path}")
    return path


def run_release(dry_run: bool, root: Path | None = None) -> None:
    root = root or project_root()
    settings = read_settings(root)
    manual = root / "docs" / "user" / "readme.adoc"
    if not manual.is_file():
        raise XtaskError(f"{manual} not found")

    if not dry_run:
        _reset_release_branch()

    website_root = (root / settings["website_root"]).resolve()
    commit = run(["git", "rev-parse", "HEAD"])
    write_changelog(
        website_root / "thisweek" / "_posts", commit, date.today().isoformat()
    )

    shutil.copy(manual, website_root / "manual.adoc")

    tags = run(["git", "tag", "--list"], echo=False)
    release_tags = [tag for tag in tags.splitlines() if is_release_tag(tag)]
    if not release_tags:
        raise XtaskError("no previous release tag found")

    git_log = run(
        ["git", "log", f"{release_tags[-1]}..HEAD", "--merges", "--reverse"],
        echo=False,
    )
    git_log_path = website_root / "git.log"
    git_log_path.write_text(git_log, encoding="utf-8")
    print(f"Wrote {git_log_path}")
