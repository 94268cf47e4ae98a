"""
Package release artifacts into <root>/dist.

    dist/<binary>-linux | -mac | -windows.exe   server binary
    dist/<binary>-<platform>.gz                 gzip of the same binary
    dist/<vsix_name>                            VS Code extension (--client only)
"""

import json
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from clarity_xtask.errors import XtaskError
from clarity_xtask.project import project_root, read_settings
from clarity_xtask.shell import gzip_file, patched, rm_rf, run, scoped_chdir


@dataclass(frozen=True)
class DistClientOpts:
    version: str
    release_tag: str


def run_dist(client_opts: DistClientOpts | None, root: Path | None = None) -> None:
    root = root or project_root()
    settings = read_settings(root)

    dist_dir = root / "dist"
    rm_rf(dist_dir)
    dist_dir.mkdir(parents=True)

    if client_opts is not None:
        dist_client(client_opts, root, settings)
    dist_server(root, settings)


def dist_client(opts: DistClientOpts, root: Path, settings: dict) -> None:
    """
    Package the extension with package.json temporarily stamped with the
    release version and tag. Nightly builds get a distinct display name;
    stable builds drop enableProposedApi.
    """
    client_dir = root / settings["client_dir"]
    package_json = client_dir / "package.json"
    nightly = opts.release_tag == "nightly"
    if not package_json.is_file():
        raise XtaskError(f"{package_json} not found")

    with patched(package_json):
        manifest = json.loads(package_json.read_text(encoding="utf-8"))
        manifest["version"] = opts.version
        manifest["releaseTag"] = opts.release_tag
        if nightly:
            display_name = manifest.get("displayName", settings["extension_id"])
            manifest["displayName"] = f"{display_name} (nightly)"
        else:
            manifest.pop("enableProposedApi", None)
        package_json.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

        with scoped_chdir(client_dir):
            run(["npm", "ci"])
            run(
                [
                    "npx",
                    "vsce",
                    "package",
                    "-o",
                    str(root / "dist" / settings["vsix_name"]),
                ]
            )


def server_artifact_names(binary: str, platform: str) -> tuple:
    """Return (cargo output name, dist name) for the server on `platform`."""
    if platform.startswith("linux"):
        return binary, f"{binary}-linux"
    if platform == "darwin":
        return binary, f"{binary}-mac"
    if platform == "win32":
        return f"{binary}.exe", f"{binary}-windows.exe"
    raise XtaskError(f"don't know how to package the server for {platform}")


def dist_server(root: Path, settings: dict, platform: str = sys.platform) -> None:
    binary = settings["server_binary"]
    src_name, dst_name = server_artifact_names(binary, platform)

    manifest = root / settings["server_crate"] / "Cargo.toml"
    env = {"CC": "clang"} if platform.startswith("linux") else None
    run(
        [
            "cargo",
            "build",
            "--manifest-path",
            str(manifest),
            "--bin",
            binary,
            "--release",
        ],
        env=env,
    )

    src = root / "target" / "release" / src_name
    dst = root / "dist" / dst_name
    if not src.is_file():
        raise XtaskError(f"cargo build did not produce {src}")
    shutil.copy(src, dst)
    gzip_file(src, dst.with_suffix(".gz"))
    print(f"Wrote {dst}")
