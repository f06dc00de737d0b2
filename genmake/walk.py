"""Recursive directory walk yielding one entry per file or directory."""

from __future__ import annotations

import os
import stat
import sys
from dataclasses import dataclass
from typing import Iterator, Sequence

_ATTRIBUTE_LETTERS = (
    (0, "A", stat.FILE_ATTRIBUTE_ARCHIVE),
    (1, "D", stat.FILE_ATTRIBUTE_DIRECTORY),
    (2, "C", stat.FILE_ATTRIBUTE_COMPRESSED),
    (3, "S", stat.FILE_ATTRIBUTE_SYSTEM),
    (4, "H", stat.FILE_ATTRIBUTE_HIDDEN),
    (5, "R", stat.FILE_ATTRIBUTE_READONLY),
)


@dataclass(frozen=True)
class Entry:
    """One object found by the walk."""

    path: str
    name: str
    size: int
    attributes: int

    @property
    def is_dir(self) -> bool:
        return bool(self.attributes & stat.FILE_ATTRIBUTE_DIRECTORY)

    def attribute_string(self) -> str:
        """Six-character attribute summary in the order A D C S H R."""
        chars = list("------")
        for pos, letter, flag in _ATTRIBUTE_LETTERS:
            if self.attributes & flag:
                chars[pos] = letter
        return "".join(chars)


def _attributes(st: os.stat_result, is_dir: bool) -> int:
    native = getattr(st, "st_file_attributes", None)
    if native is not None:
        return native
    attrs = 0
    if is_dir:
        attrs |= stat.FILE_ATTRIBUTE_DIRECTORY
    if not st.st_mode & stat.S_IWUSR:
        attrs |= stat.FILE_ATTRIBUTE_READONLY
    return attrs


def _search_dir(directory: str) -> str:
    # A bare drive spec such as "d:" means the current directory on that drive.
    return directory + "." if directory.endswith(":") else directory


def walk_tree(directory: str, recursive: bool = True) -> Iterator[Entry]:
    """Yield every entry below ``directory``, parents before their contents.

    Raises ValueError for an empty directory name and OSError when the
    top directory cannot be read. Subdirectories that cannot be read for
    lack of permission are skipped.
    """
    if not directory:
        raise ValueError("a directory must be given")
    yield from _walk(_search_dir(directory), recursive)


def _walk(directory: str, recursive: bool) -> Iterator[Entry]:
    with os.scandir(directory) as it:
        found = sorted(it, key=lambda e: e.name)
    for dirent in found:
        if dirent.name in (".", ".."):
            continue
        st = dirent.stat(follow_symlinks=False)
        is_dir = dirent.is_dir(follow_symlinks=False)
        path = os.path.join(directory, dirent.name)
        yield Entry(path, dirent.name, 0 if is_dir else st.st_size, _attributes(st, is_dir))
        if recursive and is_dir:
            try:
                yield from _walk(path, recursive)
            except PermissionError:
                continue


def main(argv: Sequence[str] | None = None) -> int:
    """List a directory tree with attributes and sizes, then print totals."""
    args = list(sys.argv if argv is None else argv)
    prog = args[0] if args else "walk"
    if len(args) < 2:
        print(f"Usage: {prog} dir-spec")
        return 0

    print("Attr      Size Path\n" + "-" * 77)
    total = 0
    total_size = 0
    rc = 0
    try:
        for entry in walk_tree(args[1]):
            print(f"{entry.attribute_string()} {entry.size:7d} {entry.path}")
            total += 1
            total_size += entry.size
    except (OSError, ValueError) as exc:
        rc = getattr(exc, "errno", None) or 1
        error = exc

    line = f"file_tree_walk: {rc}, total: {total}, total-size: {total_size} bytes."
    if rc:
        line += f", rc: {rc} (0x{rc:X}), error: {error}."
    print(line)
    return 0