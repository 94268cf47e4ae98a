"""
Project root discovery and per-project settings.

The project root is the nearest ancestor of the working directory whose
Cargo.toml declares a [workspace] table. XTASK_PROJECT_ROOT overrides the
search.

Settings come from an optional xtask.toml at the project root:

    server_crate = "crates/clarity-lsp"
    client_dir = "editors/code"
    required_rust_version = 47
"""

import os
from pathlib import Path

import tomli

from clarity_xtask.errors import XtaskError

ROOT_ENV_VAR = "XTASK_PROJECT_ROOT"
_CONFIG_FILE = "xtask.toml"

DEFAULT_SETTINGS = {
    "server_crate": "crates/clarity-lsp",
    "server_binary": "clarity-lsp",
    "client_dir": "editors/code",
    "extension_id": "clarity-lsp",
    "vsix_name": "clarity-lsp.vsix",
    "required_rust_version": 47,
    "website_root": "../clarity-lsp.github.io",
}


def _load_toml(path: Path) -> dict:
    with open(path, "rb") as f:
        try:
            return tomli.load(f)
        except tomli.TOMLDecodeError as err:
            raise XtaskError(f"{path}: {err}") from err


def _is_workspace_root(path: Path) -> bool:
    manifest = path / "Cargo.toml"
    return manifest.is_file() and "workspace" in _load_toml(manifest)


def project_root(start: Path | None = None) -> Path:
    """Resolve the workspace root. Raises XtaskError if there is none."""
    override = os.environ.get(ROOT_ENV_VAR)
    if override:
        return Path(override).resolve()

    here = (start or Path.cwd()).resolve()
    for candidate in (here, *here.parents):
        if _is_workspace_root(candidate):
            return candidate

    raise XtaskError(
        f"no Cargo workspace found above {here} (set {ROOT_ENV_VAR} to override)"
    )


def read_settings(root: Path) -> dict:
    """Return DEFAULT_SETTINGS overlaid with <root>/xtask.toml, if present."""
    settings = dict(DEFAULT_SETTINGS)
    config_path = root / _CONFIG_FILE
    if not config_path.exists():
        return settings

    overrides = _load_toml(config_path)
    unknown = sorted(set(overrides) - set(DEFAULT_SETTINGS))
    if unknown:
        raise XtaskError(f"{config_path}: unknown setting(s): {', '.join(unknown)}")

    settings.update(overrides)
    return settings
