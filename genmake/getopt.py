"""Command-line option parsing with GNU-style long options and permutation."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from typing import Iterator, Sequence

IN_ORDER = 1
"""Option value reported for a non-option when the option string starts with '-'."""


class ArgKind(enum.IntEnum):
    """Whether a long option takes an argument."""

    NO = 0
    REQUIRED = 1
    OPTIONAL = 2


@dataclass(frozen=True)
class LongOption:
    """A long option: its name, its argument kind and the value reported for it.

    When ``val`` is None the option's name is reported instead.
    """

    name: str
    has_arg: ArgKind = ArgKind.NO
    val: object = None

    @property
    def value(self) -> object:
        return self.name if self.val is None else self.val


@dataclass(frozen=True)
class ParsedOption:
    """One result of option parsing.

    ``option`` is the option character, the long option's value, ``IN_ORDER``
    for an in-order non-option, or '?' / ':' when an error was found.
    """

    option: object
    argument: str | None = None
    long_index: int | None = None
    optopt: object = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class OptionParser:
    """Stateful parser that walks an argument vector one option at a time.

    ``argv[0]`` is the program name; parsing starts at ``argv[1]``. When
    permutation is on, non-options are moved behind the options so that
    ``remaining()`` yields them once parsing has finished.
    """

    def __init__(
        self,
        argv: Sequence[str],
        optstring: str,
        long_options: Sequence[LongOption] | None = None,
        long_only: bool = False,
        permute: bool = True,
        program_name: str | None = None,
    ) -> None:
        self.argv = list(argv)
        self.optind = 1
        self._optstring = optstring
        self._long_options = None if long_options is None else tuple(long_options)
        self._long_only = long_only
        self._permute = permute
        if program_name is None:
            program_name = os.path.basename(self.argv[0]) if self.argv else "getopt"
        self.program_name = program_name
        self._place = ""
        self._nonopt_start: int | None = None
        self._nonopt_end: int | None = None
        self._opts = optstring

    # -- helpers ---------------------------------------------------------

    def _print_errors(self) -> bool:
        return not self._opts.startswith(":")

    def _badarg(self) -> str:
        return ":" if self._opts.startswith(":") else "?"

    def _fail(self, value: str, optopt: object, message: str) -> ParsedOption:
        if self._print_errors():
            print(f"{self.program_name}: {message}", file=sys.stderr)
        return ParsedOption(value, optopt=optopt, error=message)

    def _permute_args(self, start: int, end: int, opt_end: int) -> None:
        """Swap the non-option block [start, end) with the option block [end, opt_end)."""
        self.argv[start:opt_end] = self.argv[end:opt_end] + self.argv[start:end]

    def _finish_permutation(self) -> None:
        if self._nonopt_end is not None and self._nonopt_start is not None:
            self._permute_args(self._nonopt_start, self._nonopt_end, self.optind)
            self.optind -= self._nonopt_end - self._nonopt_start
        self._nonopt_start = self._nonopt_end = None

    def _parse_long(self, prefix: str, short_too: bool) -> ParsedOption | None:
        assert self._long_options is not None
        current = self._place
        self.optind += 1

        sep = current.find("=")
        if sep < 0:
            sep = current.find(":")
        if sep >= 0:
            name, inline_arg = current[:sep], current[sep + 1:]
        else:
            name, inline_arg = current, None

        match: int | None = None
        exact = False
        ambiguous = False
        for i, opt in enumerate(self._long_options):
            if not opt.name.startswith(name):
                continue
            if len(opt.name) == len(name):
                match, exact = i, True
                break
            if short_too and len(name) == 1:
                continue
            if match is None:
                match = i
            else:
                first = self._long_options[match]
                if (
                    self._long_only
                    or opt.has_arg != first.has_arg
                    or opt.value != first.value
                ):
                    ambiguous = True

        if not exact and ambiguous:
            return self._fail("?", None, f"option `{prefix}{name}' is ambiguous")

        if match is None:
            if short_too:
                self.optind -= 1
                return None
            return self._fail("?", None, f"unrecognized option `{prefix}{current}'")

        opt = self._long_options[match]
        if opt.has_arg == ArgKind.NO and inline_arg is not None:
            return self._fail(
                "?", opt.value, f"option `{prefix}{name}' doesn't allow an argument"
            )

        argument: str | None = None
        if opt.has_arg in (ArgKind.REQUIRED, ArgKind.OPTIONAL):
            if inline_arg is not None:
                argument = inline_arg
            elif opt.has_arg == ArgKind.REQUIRED:
                if self.optind < len(self.argv):
                    argument = self.argv[self.optind]
                self.optind += 1

        if opt.has_arg == ArgKind.REQUIRED and argument is None:
            self.optind -= 1
            return self._fail(
                self._badarg(), opt.value, f"option `{prefix}{current}' requires an argument"
            )

        return ParsedOption(opt.value, argument, long_index=match)

    # -- public interface ------------------------------------------------

    def next_option(self) -> ParsedOption | None:
        """Return the next option, or None when there are no more."""
        opts = self._optstring
        all_args = False
        permute = self._permute
        posixly_correct = "POSIXLY_CORRECT" in os.environ
        if opts.startswith("-"):
            all_args = True
        elif posixly_correct or opts.startswith("+"):
            permute = False
        if opts[:1] in ("+", "-"):
            opts = opts[1:]
        self._opts = opts

        while not self._place:
            if self.optind >= len(self.argv):
                self._place = ""
                if self._nonopt_end is not None:
                    self._finish_permutation()
                elif self._nonopt_start is not None:
                    self.optind = self._nonopt_start
                self._nonopt_start = self._nonopt_end = None
                return None

            arg = self.argv[self.optind]
            if not arg.startswith("-") or arg == "-":
                self._place = ""
                if all_args:
                    self.optind += 1
                    return ParsedOption(IN_ORDER, arg)
                if not permute:
                    return None
                if self._nonopt_start is None:
                    self._nonopt_start = self.optind
                elif self._nonopt_end is not None:
                    self._permute_args(self._nonopt_start, self._nonopt_end, self.optind)
                    self._nonopt_start = self.optind - (
                        self._nonopt_end - self._nonopt_start
                    )
                    self._nonopt_end = None
                self.optind += 1
                continue

            if self._nonopt_start is not None and self._nonopt_end is None:
                self._nonopt_end = self.optind

            self._place = arg[1:]
            if self._place == "-":
                self.optind += 1
                self._place = ""
                self._finish_permutation()
                return None
            break

        if self._long_options is not None and (
            self._place.startswith("-") or self._long_only
        ):
            short_too = False
            prefix = "-"
            if self._place.startswith("-"):
                self._place = self._place[1:]
                prefix = "--"
            elif self._place[0] != ":" and self._place[0] in opts:
                short_too = True
            result = self._parse_long(prefix, short_too)
            if result is not None:
                self._place = ""
                return result

        optchar = self._place[0]
        self._place = self._place[1:]
        spec_at = opts.find(optchar)
        if optchar == ":" or (optchar == "-" and self._place) or spec_at < 0:
            if optchar == "-" and not self._place:
                return None
            if not self._place:
                self.optind += 1
            template = "illegal option -- %s" if posixly_correct else "invalid option -- %s"
            return self._fail("?", optchar, template % optchar)

        spec = opts[spec_at + 1:spec_at + 3]

        if self._long_options is not None and optchar == "W" and spec.startswith(";"):
            if not self._place:
                self.optind += 1
                if self.optind >= len(self.argv):
                    self._place = ""
                    return self._fail(
                        self._badarg(), optchar, f"option requires an argument -- {optchar}"
                    )
                self._place = self.argv[self.optind]
            result = self._parse_long("-W ", False)
            self._place = ""
            return result

        if not spec.startswith(":"):
            if not self._place:
                self.optind += 1
            return ParsedOption(optchar)

        argument: str | None = None
        if self._place:
            argument = self._place
        elif spec != "::":
            self.optind += 1
            if self.optind >= len(self.argv):
                self._place = ""
                return self._fail(
                    self._badarg(), optchar, f"option requires an argument -- {optchar}"
                )
            argument = self.argv[self.optind]
        self._place = ""
        self.optind += 1
        return ParsedOption(optchar, argument)

    def __iter__(self) -> Iterator[ParsedOption]:
        return iter(self.next_option, None)

    def remaining(self) -> list[str]:
        """Arguments left after the options (valid once parsing is finished)."""
        return self.argv[self.optind:]


def getopt(
    argv: Sequence[str], optstring: str, program_name: str | None = None
) -> tuple[list[ParsedOption], list[str]]:
    """Parse short options only, stopping at the first non-option."""
    parser = OptionParser(argv, optstring, None, False, False, program_name)
    return list(parser), parser.remaining()


def getopt_long(
    argv: Sequence[str],
    optstring: str,
    long_options: Sequence[LongOption],
    program_name: str | None = None,
) -> tuple[list[ParsedOption], list[str]]:
    """Parse short and '--' long options, moving non-options to the end."""
    parser = OptionParser(argv, optstring, long_options, False, True, program_name)
    return list(parser), parser.remaining()


def getopt_long_only(
    argv: Sequence[str],
    optstring: str,
    long_options: Sequence[LongOption],
    program_name: str | None = None,
) -> tuple[list[ParsedOption], list[str]]:
    """Like getopt_long, but long options may also start with a single '-'."""
    parser = OptionParser(argv, optstring, long_options, True, True, program_name)
    return list(parser), parser.remaining()