"""Find C/C++ sources below a directory and write a GNU makefile for them."""

from __future__ import annotations

import enum
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence, TextIO

from genmake.getopt import ArgKind, LongOption, getopt_long
from genmake.templates import MAKE_TEMPLATE, VERSION_STRING, rule_for
from genmake.walk import walk_tree

_log = logging.getLogger(__name__)

LINE_END = "\\"
_MAX_EXTENSION_LEN = len(".cpp") + 1


class SourceKind(enum.Enum):
    """Kinds of files the generator looks for."""

    C = "c"
    CC = "cc"
    CPP = "cpp"
    CXX = "cxx"
    RC = "rc"
    H_IN = "h.in"


_EXTENSIONS = {
    ".c": SourceKind.C,
    ".cc": SourceKind.CC,
    ".cpp": SourceKind.CPP,
    ".cxx": SourceKind.CXX,
}

_COMPILED = (SourceKind.C, SourceKind.CC, SourceKind.CPP, SourceKind.CXX)
_COLLECTED = _COMPILED + (SourceKind.RC,)


def _strip_dot_prefix(path: str) -> str:
    return path[2:] if path.startswith(("./", ".\\")) else path


def classify(path: str) -> SourceKind | None:
    """Return the kind of source ``path`` names, or None if it is of no interest."""
    if len(path) <= 2:
        return None
    dot = path.rfind(".")
    if dot < 0:
        return None
    ext = path[dot:]
    if len(ext) > _MAX_EXTENSION_LEN:
        return None
    if ext in _EXTENSIONS:
        return _EXTENSIONS[ext]
    if path.endswith(".h.in"):
        return SourceKind.H_IN
    if ext == ".rc" and _strip_dot_prefix(path).lower() != "gen-make.rc":
        return SourceKind.RC
    return None


@dataclass
class SourceSet:
    """Source files found, grouped by kind, plus the directories they live in."""

    _files: dict[SourceKind, list[str]] = field(
        default_factory=lambda: {kind: [] for kind in SourceKind}
    )
    vpaths: list[str] = field(default_factory=list)

    def add(self, path: str) -> SourceKind | None:
        """Record ``path`` if it is a source to build; return its kind or None."""
        normalized = path.replace("\\", "/")
        if normalized.startswith("./.git/"):
            return None

        kind = classify(path)
        collected = kind in _COLLECTED
        _log.debug(
            "%-40s %sconsidered. kind: %s",
            path,
            "" if collected else "not ",
            kind.value if kind else "-",
        )
        if not collected:
            return None

        relative = _strip_dot_prefix(normalized)
        self._files[kind].append(relative)

        if "/" in relative:
            directory = relative.split("/", 1)[0]
            add_it = directory not in self.vpaths
            if add_it:
                self.vpaths.append(directory)
            _log.debug("Did %sadd '%s' to 'vpaths[].'", "" if add_it else "not ", directory)
        return kind

    def files(self, kind: SourceKind) -> list[str]:
        """The files of ``kind`` in the order they were found."""
        return list(self._files[kind])

    def num_sources(self) -> int:
        """Number of .c/.cc/.cpp/.cxx files found."""
        return sum(len(self._files[kind]) for kind in _COMPILED)


def find_sources(root: str = ".", recursive: bool = True) -> SourceSet:
    """Walk ``root`` and collect the source files below it."""
    sources = SourceSet()
    try:
        for entry in walk_tree(root, recursive):
            relative = os.path.relpath(entry.path, root).replace(os.sep, "/")
            sources.add("./" + relative)
    except OSError as exc:
        _log.debug("walk of %s stopped: %s", root, exc)

    for kind in SourceKind:
        for i, name in enumerate(sources.files(kind)):
            _log.debug("%s_files[%2d]: '%s'", kind.value, i, name)
    return sources


class MakefileWriter:
    """Expands template lines against a set of sources."""

    def __init__(
        self,
        sources: SourceSet,
        out: TextIO,
        recursive: bool = True,
        now: datetime | None = None,
        astyle_found: bool | None = None,
    ) -> None:
        self.sources = sources
        self.out = out
        self.recursive = recursive
        self.now = now
        if astyle_found is None:
            astyle_found = shutil.which("astyle.exe") is not None
        self.astyle_found = astyle_found
        self.main_found = False
        self.winmain_found = False
        self.dllmain_found = False
        self._longest = 0

    def write_files(self, files: Sequence[str], indent: int) -> None:
        """Write a backslash-continued list of files, aligned at ``indent``."""
        if not files:
            return
        self._longest = max(self._longest, max(len(f) for f in files))
        last = len(files) - 1
        for i, name in enumerate(files):
            self.out.write(name if i == 0 else " " * indent + name)
            if i < last:
                self.out.write(" " + " " * (self._longest - len(name)) + LINE_END + "\n")
            else:
                self.out.write("\n")

    def write_vpaths(self) -> None:
        """Write a VPATH statement if any source lives in a subdirectory."""
        vpaths = self.sources.vpaths
        if not vpaths:
            return
        self.out.write("VPATH = ")
        for directory in vpaths:
            self.out.write(directory + " ")
        self.out.write(f"  #! Found {len(vpaths)} VPATHs\n")

    def _write_sources(self, prefix: str) -> None:
        indent = len(prefix)
        pad = " " * indent
        files = self.sources.files
        self.out.write(prefix)
        self.write_files(files(SourceKind.C), indent)
        self.out.write(
            f"{pad}#! {len(files(SourceKind.C))} .c SOURCES files found "
            f"(recursively: {int(self.recursive)})\n"
        )
        for kind, name, extra in (
            (SourceKind.CC, "CC_SOURCES", 3),
            (SourceKind.CPP, "CPP_SOURCES", 4),
            (SourceKind.CXX, "CXX_SOURCES", 4),
        ):
            found = files(kind)
            if found:
                self.out.write(
                    f"\n#\n#! Add these $({name}) to $(OBJECTS) as needed.\n#\n{name} = "
                )
                self.write_files(found, indent + extra)
        num_h_in = len(files(SourceKind.H_IN))
        if num_h_in:
            self.out.write(
                f"{pad}#! Found {num_h_in} .h.in-file(s); add rules for these as needed.\n"
            )
        num_rc = len(files(SourceKind.RC))
        if num_rc:
            self.out.write(f"{pad}#! Found {num_rc} .rc-file(s).\n")

    def write_line(self, template_line: str) -> None:
        """Write one template line, expanding its directive if it has one."""
        templ = template_line
        p = templ.find("%")
        directive = templ[p + 1:p + 2] if p >= 0 else ""

        if directive == "a":
            self.out.write(f"{templ[:p]}{int(self.astyle_found)}{templ[p + 2:]}\n")
            return
        if directive == "s":
            self._write_sources(templ[:p])
            return
        if directive == "T":
            stamp = (self.now or datetime.now()).ctime()[:24]
            self.out.write(f"{templ[:p]}{stamp}{templ[p + 2:]}\n")
            return
        if directive == "c":
            for kind in _COMPILED:
                if self.sources.files(kind):
                    self.out.write(rule_for(kind) + "\n")
            templ = templ[p + 2:]
            p = templ.find("%")
            directive = templ[p + 1:p + 2] if p >= 0 else ""

        if directive == "v":
            self.write_vpaths()
            return

        if p < 0 and templ.startswith("all: "):
            if not self.main_found and not self.winmain_found:
                self.out.write(
                    "#\n#! Failed to find a 'main()' or a 'WinMain()' in the SOURCES. "
                    "Is it a .DLL?\n#\n"
                )
            elif self.dllmain_found:
                self.out.write(
                    "#\n#! Found a 'DllMain()' in the SOURCES. Rewrite the '$(PROGRAM)' "
                    "rule into a 'link_DLL' rule.\n#\n"
                )
        self.out.write(templ + "\n")


def generate(
    sources: SourceSet,
    out: TextIO,
    recursive: bool = True,
    now: datetime | None = None,
    astyle_found: bool | None = None,
) -> None:
    """Write the whole makefile for ``sources`` to ``out``."""
    writer = MakefileWriter(sources, out, recursive, now, astyle_found)
    for line in MAKE_TEMPLATE:
        writer.write_line(line)
    out.write("\n")


_LONG_OPTIONS = (
    LongOption("help", ArgKind.NO, "h"),
    LongOption("debug", ArgKind.NO, "d"),
    LongOption("no-recurse", ArgKind.NO, "r"),
)


def _usage(prog: str) -> None:
    print(
        f"gen-make ver {VERSION_STRING}; A simple makefile generator.\n"
        f"{prog} <options>:"
    )
    print(
        "  -d, --debug:      sets debug-level.\n"
        "  -r, --no-recurse: do not search recursively for source-files."
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Generate a makefile for the sources below the current directory on stdout."""
    args = list(sys.argv if argv is None else argv)
    if not args:
        args = ["gen-make"]
    prog = args[0]

    debug_level = 0
    recursive = True
    options, _ = getopt_long(args, "hdrp", _LONG_OPTIONS, program_name="gen-make")
    for opt in options:
        if opt.option == "h":
            _usage(prog)
            return 0
        if opt.option == "d":
            debug_level += 1
        elif opt.option == "r":
            recursive = False
        elif opt.option == "p":
            pass
        else:
            print(f"Illegal option: '{opt.option}'", file=sys.stderr)
            _usage(prog)
            return 0

    handler: logging.Handler | None = None
    previous_level = _log.level
    if debug_level >= 2:
        handler = logging.StreamHandler(sys.stderr)
        _log.addHandler(handler)
        _log.setLevel(logging.DEBUG)
    try:
        sources = find_sources(".", recursive)
        if sources.num_sources() == 0:
            sys.stderr.write("I found no .c/.cc/.cpp/.cxx sources")
            return 1
        generate(sources, sys.stdout, recursive)
        sys.stderr.write("Generated makefile to stdout.\n")
        return 0
    finally:
        if handler is not None:
            _log.removeHandler(handler)
            _log.setLevel(previous_level)