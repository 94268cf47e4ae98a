"""
xtask CLI entry point.

Each subcommand has a handler in COMMANDS. Handlers turn the raw
arguments into a frozen configuration value, reject leftover flags with
finish(), then hand the configuration to the matching operation.
Anything not in COMMANDS prints USAGE and succeeds.
"""

import sys
from pathlib import Path

from clarity_xtask import __version__, pre_commit
from clarity_xtask.args import Arguments
from clarity_xtask.dist import DistClientOpts, run_dist
from clarity_xtask.errors import ArgumentError, XtaskError
from clarity_xtask.install import ClientOpt, InstallCmd, ServerOpt
from clarity_xtask.pre_cache import run_pre_cache
from clarity_xtask.project import project_root
from clarity_xtask.release import run_release
from clarity_xtask.shell import scoped_chdir

USAGE = f"""\
xtask {__version__}
Run custom build command.

USAGE:
    xtask <SUBCOMMAND>

SUBCOMMANDS:
    install
    install-pre-commit-hook
    pre-cache
    release
    dist"""

INSTALL_HELP = """\
xtask install
Install clarity-lsp server or editor plugin.

USAGE:
    xtask install [FLAGS]

FLAGS:
        --client-code    Install only VS Code plugin
        --server         Install only the language server
        --jemalloc       Use jemalloc for server
    -h, --help           Prints help information"""

# (--server, --client-code) -> (install client, install server).
# Both flags together has no entry.
_INSTALL_TARGETS = {
    (False, False): (True, True),
    (True, False): (False, True),
    (False, True): (True, False),
}


# ---------------------------------------------------------------------------
# Configuration builders
# ---------------------------------------------------------------------------


def parse_install_args(args: Arguments) -> InstallCmd:
    server = args.contains("--server")
    client_code = args.contains("--client-code")
    targets = _INSTALL_TARGETS.get((server, client_code))
    if targets is None:
        raise ArgumentError(
            "The argument `--server` cannot be used with `--client-code`\n\n"
            "For more information try --help"
        )

    jemalloc = args.contains("--jemalloc")
    args.finish()

    install_client, install_server = targets
    return InstallCmd(
        client=ClientOpt.VS_CODE if install_client else None,
        server=ServerOpt(jemalloc=jemalloc) if install_server else None,
    )


def parse_release_args(args: Arguments) -> bool:
    dry_run = args.contains("--dry-run")
    args.finish()
    return dry_run


def parse_dist_args(args: Arguments) -> DistClientOpts | None:
    client_opts = None
    if args.contains("--client"):
        client_opts = DistClientOpts(
            version=args.value_from_str("--version"),
            release_tag=args.value_from_str("--tag"),
        )
    args.finish()
    return client_opts


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _cmd_install(args: Arguments, root: Path) -> None:
    if args.contains("-h", "--help"):
        print(INSTALL_HELP, file=sys.stderr)
        return
    parse_install_args(args).run(root)


def _cmd_install_pre_commit_hook(args: Arguments, root: Path) -> None:
    args.finish()
    pre_commit.install_hook(root)


def _cmd_pre_cache(args: Arguments, root: Path) -> None:
    args.finish()
    run_pre_cache(root)


def _cmd_release(args: Arguments, root: Path) -> None:
    run_release(parse_release_args(args), root)


def _cmd_dist(args: Arguments, root: Path) -> None:
    run_dist(parse_dist_args(args), root)


def _cmd_usage(args: Arguments, root: Path) -> None:
    print(USAGE, file=sys.stderr)


COMMANDS = {
    "install": _cmd_install,
    "install-pre-commit-hook": _cmd_install_pre_commit_hook,
    "pre-cache": _cmd_pre_cache,
    "release": _cmd_release,
    "dist": _cmd_dist,
}


def dispatch(args: Arguments, root: Path) -> None:
    subcommand = args.subcommand() or ""
    handler = COMMANDS.get(subcommand, _cmd_usage)
    handler(args, root)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _report(operation, *op_args) -> int:
    try:
        operation(*op_args)
    except XtaskError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    return 0


def _run_in_project(tokens: list) -> None:
    # Resolved once: a relative XTASK_PROJECT_ROOT means something else
    # after the chdir.
    root = project_root()
    with scoped_chdir(root):
        dispatch(Arguments(tokens), root)


def main(argv=None):
    argv = sys.argv if argv is None else argv

    # The hook copy of this script never reaches subcommand parsing.
    if argv and pre_commit.invoked_as_hook(argv[0]):
        return _report(pre_commit.run_hook)

    return _report(_run_in_project, argv[1:])


if __name__ == "__main__":
    sys.exit(main())
