"""
Install the clarity-lsp server and/or the VS Code extension.

Server:  cargo install --path <server_crate> --locked --force [--features jemalloc]
Client:  npm install, npm run package, then <code> --install-extension <vsix>
"""

import os
import re
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from clarity_xtask.errors import CommandError, XtaskError
from clarity_xtask.project import project_root, read_settings
from clarity_xtask.shell import run, scoped_chdir

_CODE_BINARIES = ["code", "code-insiders", "codium", "code-oss"]
_MAC_CODE_BIN = "Applications/Visual Studio Code.app/Contents/Resources/app/bin"


class ClientOpt(Enum):
    VS_CODE = "vscode"


@dataclass(frozen=True)
class ServerOpt:
    jemalloc: bool = False


@dataclass(frozen=True)
class InstallCmd:
    client: ClientOpt | None
    server: ServerOpt | None

    def run(self, root: Path | None = None) -> None:
        if sys.platform == "darwin":
            fix_path_for_mac()

        root = root or project_root()
        settings = read_settings(root)

        if self.server is not None:
            install_server(self.server, root, settings)
        if self.client is ClientOpt.VS_CODE:
            install_vscode_client(root, settings)


def fix_path_for_mac() -> None:
    """Append the VS Code app bundle bin dirs to PATH so `code` resolves."""
    candidates = [Path("/") / _MAC_CODE_BIN, Path.home() / _MAC_CODE_BIN]
    found = [str(p) for p in candidates if p.exists()]
    if found:
        os.environ["PATH"] = os.pathsep.join([os.environ.get("PATH", ""), *found])


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


def rust_minor_version(cargo_version: str) -> int | None:
    """Parse the minor version out of `cargo --version` output."""
    match = re.match(r"cargo 1\.(\d+)", cargo_version)
    return int(match.group(1)) if match else None


def _warn_old_rust(required: int) -> None:
    print(
        f"\nWARNING: at least rust 1.{required}.0 is required to compile "
        "clarity-lsp\n",
        file=sys.stderr,
    )


def install_server(opts: ServerOpt, root: Path, settings: dict) -> None:
    required = settings["required_rust_version"]
    minor = rust_minor_version(run(["cargo", "--version"]))
    old_rust = minor is not None and minor < required
    if old_rust:
        _warn_old_rust(required)

    cmd = [
        "cargo",
        "install",
        "--path",
        str(root / settings["server_crate"]),
        "--locked",
        "--force",
    ]
    if opts.jemalloc:
        cmd += ["--features", "jemalloc"]

    try:
        run(cmd)
    except CommandError:
        if old_rust:
            _warn_old_rust(required)
        raise


# ---------------------------------------------------------------------------
# VS Code extension
# ---------------------------------------------------------------------------


def _answers_version(binary: str) -> bool:
    try:
        run([binary, "--version"], echo=False)
    except XtaskError:
        return False
    return True


def find_code() -> str:
    """Return the first VS Code flavour on PATH that runs `--version`."""
    for binary in _CODE_BINARIES:
        if _answers_version(binary):
            return binary
    raise XtaskError(
        "Can't execute `code --version`. Perhaps it is not in $PATH?"
    )


def install_vscode_client(root: Path, settings: dict) -> None:
    with scoped_chdir(root / settings["client_dir"]):
        run(["npm", "--version"])
        code = find_code()

        run(["npm", "install"])
        run(["npm", "run", "package", "--scripts-prepend-node-path"])
        run([code, "--install-extension", settings["vsix_name"], "--force"])
        installed = run([code, "--list-extensions"], echo=False)

    if settings["extension_id"] not in installed:
        raise XtaskError(
            "Could not install the Visual Studio Code extension. Please make "
            "sure you have at least NodeJS 12.x together with the latest "
            "version of VS Code installed and try again. Note that installing "
            "via `xtask install` does not work for VS Code Remote, instead "
            "you'll need to install the .vsix manually."
        )
    print(f"Installed VS Code extension '{settings['extension_id']}'.")
