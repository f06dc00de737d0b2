# genmake

A quick makefile generator for C and C++ projects built with MSVC (`cl`) or
`clang-cl` under GNU make.

`gen-make` searches the current directory (recursively by default) for
`.c`, `.cc`, `.cpp` and `.cxx` sources, plus `.rc` and `.h.in` files, and
writes a ready-to-edit GNU makefile to standard output. Top-level
subdirectories holding sources are collected into a `VPATH` line, and
pattern rules are emitted only for the source kinds actually found. Lines
marked `#!` in the output are hints for you to adjust. The `USE_ASTYLE`
default in the output is `1` when `astyle.exe` is found on `PATH`, else `0`.

## Installation

```
pip install .
```

## Usage

Generate a makefile for the project in the current directory:

```
gen-make > Makefile.Windows
```

Options:

- `-h`, `--help`: show usage and exit.
- `-d`, `--debug`: raise the debug level; given twice, the files found and
  the decisions taken are logged to standard error.
- `-r`, `--no-recurse`: only look at files in the current directory.
- `-p`: accepted and ignored.

An unknown option prints a message and the usage text. If no C or C++
sources are found, nothing is written to standard output, a message goes to
standard error and the exit status is 1. Files under `.git` are always
ignored, as is a file named `gen-make.rc`.

Then build with:

```
make -f Makefile.Windows CC=cl
```

### Listing a directory tree

`file-tree-walk` prints every entry under a directory with its attributes
(`A D C S H R`), size and path, followed by the number of entries and their
total size:

```
file-tree-walk some-dir
```

## Library use

```python
import io
from genmake.generator import find_sources, generate

sources = find_sources(".", recursive=True)
buffer = io.StringIO()
generate(sources, buffer, recursive=True)
print(buffer.getvalue())
```

The modules:

- `genmake.generator`: `classify`, `SourceKind`, `SourceSet`,
  `find_sources`, `MakefileWriter`, `generate` and the `main` command.
- `genmake.templates`: the makefile template (`MAKE_TEMPLATE`), the
  per-language compile rules and `rule_for`.
- `genmake.getopt`: `OptionParser`, `getopt`, `getopt_long` and
  `getopt_long_only`, with `LongOption`, `ArgKind` and `ParsedOption`.
- `genmake.smartlist`: `SmartList`, a `list` with swap-delete, ordered
  delete, duplicate counting, uniquing, comparison-function sorting and
  binary search.
- `genmake.walk`: `walk_tree`, yielding `Entry` records, and the
  `file-tree-walk` command.

## What it does not do

`gen-make` does not look inside the sources for `main()`, `WinMain()` or
`DllMain()`; the generated makefile always carries a `#!` note before the
`all:` rule asking whether the project is a DLL. It does not compute header
dependencies itself (the generated makefile has a `depend` goal for that),
and it never runs `make` or a compiler.

## Running the tests

```
pip install .[test]
pytest
```