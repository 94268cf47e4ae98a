"""
Strict, consume-once access to the raw command-line tokens.

Each query removes the first occurrence of the flag it asked for. A
repeated flag is handed back, so once a handler has asked for every flag
it supports, finish() rejects it along with whatever else is left over.

Flag matching is delegated to argparse: every query builds a throwaway
parser that knows only the requested flag and lets parse_known_args()
hand back the untouched remainder.
"""

import argparse

from clarity_xtask.errors import ArgumentError


class _FlagParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message):
        raise ArgumentError(message)


class _Occurrences(argparse.Action):
    """Record (option_string, value) for every occurrence of the flag."""

    def __call__(self, parser, namespace, values, option_string=None):
        seen = getattr(namespace, self.dest) or []
        setattr(namespace, self.dest, seen + [(option_string, values)])


def _flag_parser() -> _FlagParser:
    return _FlagParser(prog="xtask", add_help=False, allow_abbrev=False)


class Arguments:
    def __init__(self, tokens):
        self._tokens = list(tokens)

    @property
    def remaining(self) -> list:
        return list(self._tokens)

    def subcommand(self):
        """Pop the leading positional token, or return None if there is none."""
        if not self._tokens or self._tokens[0].startswith("-"):
            return None
        return self._tokens.pop(0)

    def contains(self, *names: str) -> bool:
        """Return True if any spelling in `names` was given, consuming one."""
        parser = _flag_parser()
        parser.add_argument(*names, dest="seen", action=_Occurrences, nargs=0)
        namespace, self._tokens = parser.parse_known_args(self._tokens)
        seen = namespace.seen or []
        for option_string, _ in seen[1:]:
            self._tokens.append(option_string)
        return bool(seen)

    def value_from_str(self, name: str) -> str:
        """
        Consume `name <value>` (or `name=<value>`) and return the value.
        Raises ArgumentError if the flag is absent or has no value.
        """
        parser = _flag_parser()
        parser.add_argument(name, dest="seen", action=_Occurrences, required=True)
        namespace, self._tokens = parser.parse_known_args(self._tokens)
        (_, value), *repeats = namespace.seen
        for option_string, repeated in repeats:
            self._tokens.extend([option_string, repeated])
        return value

    def finish(self) -> None:
        if not self._tokens:
            return
        plural = "s" if len(self._tokens) > 1 else ""
        raise ArgumentError(
            f"unexpected argument{plural}: {' '.join(self._tokens)}"
        )
