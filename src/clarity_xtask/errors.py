"""Errors reported to the user by the xtask dispatcher."""


class XtaskError(Exception):
    """A failure shown to the user as `error: <message>`."""


class ArgumentError(XtaskError):
    """Malformed, missing, conflicting or unexpected command-line arguments."""


class CommandError(XtaskError):
    """An external command exited with a non-zero status."""

    def __init__(self, cmd: list, returncode: int):
        self.cmd = list(cmd)
        self.returncode = returncode
        super().__init__(
            f"command exited with code {returncode}: {' '.join(self.cmd)}"
        )
