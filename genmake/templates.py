"""The makefile template and the per-language compile rules it refers to.

Template lines may hold one of these directives, expanded by the writer:
``%T`` (time stamp), ``%v`` (VPATH statement), ``%a`` (astyle found),
``%s`` (source-file lists) and ``%c`` (compile rules).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import chain

VER_MAJOR = 1
VER_MINOR = 1
VER_MICRO = 0
VERSION = (VER_MAJOR, VER_MINOR, VER_MICRO)
VERSION_STRING = f"{VER_MAJOR}.{VER_MINOR}.{VER_MICRO}"

_COMPILERS = ("cl", "clang-cl")
_GOALS = ("all", "depend", "clean", "vclean", "install")
_CRT_MACROS = tuple(
    f"_CRT_{name}"
    for name in (
        "NONSTDC_NO_WARNINGS",
        "OBSOLETE_NO_WARNINGS",
        "SECURE_NO_DEPRECATE",
        "SECURE_NO_WARNINGS",
    )
)


# ---------------------------------------------------------------------------
# Small builders for makefile text.
# ---------------------------------------------------------------------------

def _indent(lines: Iterable[str], width: int = 2) -> list[str]:
    pad = " " * width
    return [pad + line if line else "" for line in lines]


def _aligned(rows: Sequence[tuple[str, str, str]]) -> list[str]:
    """Assignments with their operators lined up in one column."""
    width = max(len(name) for name, _, _ in rows)
    return [f"{name.ljust(width)} {op} {value}".rstrip() for name, op, value in rows]


def _continued(head: str, items: Sequence[str]) -> list[str]:
    """One value spread over several lines joined by backslashes."""
    width = max(len(item) for item in items[:-1])
    pad = " " * len(head)
    lines = [
        (head if n == 0 else pad) + item.ljust(width) + " \\"
        for n, item in enumerate(items[:-1])
    ]
    lines.append(pad + items[-1])
    return lines


def _banner(*texts: str) -> list[str]:
    return ["#", *(f"# {text}" for text in texts), "#"]


def _define(name: str, body: Iterable[str]) -> list[str]:
    return [f"define {name}", *_indent(body), "endef"]


def _conditional(
    test: str, then: Iterable[str], otherwise: Iterable[str] | None = None
) -> list[str]:
    lines = [test, *_indent(then)]
    if otherwise is not None:
        lines += ["else", *_indent(otherwise)]
    lines.append("endif")
    return lines


def _make_rule(target: str, prereqs: str, recipe: Iterable[str] = ()) -> list[str]:
    header = f"{target}: {prereqs}" if prereqs else f"{target}:"
    return [header, *(f"\t{step}" for step in recipe)]


def _join(*blocks: Sequence[str]) -> list[str]:
    """Concatenate blocks with one empty line between each."""
    lines: list[str] = []
    for number, block in enumerate(blocks):
        if number:
            lines.append("")
        lines.extend(block)
    return lines


def _green(text: str) -> str:
    return f"$(call green_msg, {text})"


def _cdef(name: str, value: str, width: int) -> str:
    return f"#define {name.ljust(width)}{value}"


def _rc_block(header: str, body: Iterable[str]) -> list[str]:
    return [header, "BEGIN", *_indent(body), "END"]


# ---------------------------------------------------------------------------
# Sections of the template.
# ---------------------------------------------------------------------------

def _header() -> list[str]:
    return _banner(
        "GNU Makefile for project X (MSVC+clang-cl).",
        "Generated by 'gen-make' at %T.",
    ) + _aligned([
        ("THIS_FILE", ":=", "$(firstword $(MAKEFILE_LIST))"),
        ("TODAY", ":=", "$(shell date +%d-%B-%Y)"),
        ("PYTHON", ":=", "py -3"),
        ("MAKEFLAGS", "+=", "--warn-undefined-variables"),
    ])


def _version() -> list[str]:
    parts = (("MAJOR", 1), ("MINOR", 2), ("PATCH", 3))
    rows = [(f"VER_{part}", "=", f"{number}  #! Change this") for part, number in parts]
    rows.append(("VERSION", "=", ".".join(f"$(VER_{part})" for part, _ in parts)))
    return _aligned(rows)


def _settings() -> list[list[str]]:
    usage = (
        "Usage: $(MAKE) -f $(THIS_FILE) CC=["
        + " | ".join(_COMPILERS)
        + "] ["
        + " | ".join(_GOALS)
        + "]"
    )
    return [
        _banner("Options:") + _aligned([
            ("USE_ASTYLE", "?=", "%a"),
            ("USE_OPENSSL", "?=", "0"),
            ("USE_CRT_DEBUG", "?=", "0"),
        ]),
        _banner("What to build:") + ["TARGETS = bin/foo.exe   #! Change this"],
        _banner("Location of required packages") + _aligned([
            ("OPENSSL_ROOT", "=", "c:/dev/src/inet/Crypto/OpenSSL  #! Example requirement."),
            ("MSVC_ROOT", "=", "$(realpath $(VSINSTALLDIR))"),
        ]),
        _define("Usage", ["", usage]),
        _conditional(
            f"ifneq ($(CC),{_COMPILERS[0]})",
            _conditional(f"ifneq ($(CC),{_COMPILERS[1]})", ["$(error $(Usage))"]),
        ),
        ["OBJ_DIR = objects"],
        _banner("Undefine any '%CL%' env-var") + ["export CL="],
        _banner(
            "Since 'clang-cl' could pick up some .h-files from this.",
            "Just remove it.",
        ) + ["export C_INCLUDE_PATH="],
        _aligned([
            (f"{suffix}_to_obj", "=", f"$(addprefix $(OBJ_DIR)/, $(notdir $(1:.{suffix}=.obj)))")
            for suffix in ("c", "cc", "cpp")
        ]),
        ["INSTALL_ROOT = $(VC_ROOT)"],
    ]


def _flags() -> list[list[str]]:
    cflags = ["-nologo -W3 -Zi -I.", "-I./$(OBJ_DIR)", *(f"-D{m}" for m in _CRT_MACROS)]
    openssl_libs = " ".join(f"$(OPENSSL_ROOT)/lib/lib{name}.lib" for name in ("ssl", "crypto"))
    return [
        _continued("CFLAGS = ", cflags),
        ["CFLAGS += -D_WIN32_WINNT=0x0601 -DHAVE_CONFIG_H -I. #! Add include dirs as needed"],
        _aligned([
            ("LDFLAGS", "=", "-nologo -debug -incremental:no -map -verbose"),
            ("RCFLAGS", "=", "-nologo"),
        ]),
        _conditional(
            "ifeq ($(CC),clang-cl)",
            [
                *_continued("CFLAGS  += ", ["-fms-compatibility", "-ferror-limit=5"]),
                "RCFLAGS += -D__clang__",
            ],
            ["RCFLAGS += -D_MSC_VER"],
        ),
        _conditional(
            "ifeq ($(USE_CRT_DEBUG),1)",
            _aligned([
                ("CFLAGS", "+=", "-MDd -Od -GF -GS -RTCs -RTCu -RTCc"),
                ("RCFLAGS", "+=", "-D_DEBUG"),
            ]),
            ["CFLAGS += -MD -Ot"],
        ),
        ["CXXFLAGS = -std:c++17 -TP -EHsc  #! CFLAGS for C++"],
        ["EX_LIBS += ws2_32.lib  #! Add more libs as needed"],
        _conditional(
            "ifeq ($(USE_OPENSSL),1)",
            _aligned([
                ("CFLAGS", "+=", "-DHAVE_OPENSSL -DOPENSSL_USE_DEPRECATED -I$(OPENSSL_ROOT)/include"),
                ("EX_LIBS", "+=", openssl_libs),
            ]),
        ),
        ["SOURCES = %s"],
        ["OBJECTS = $(call c_to_obj, $(SOURCES))"],
        ["GENERATED = $(OBJ_DIR)/config.h"],
    ]


def _targets() -> list[list[str]]:
    dll_block = [
        "#",
        "#! Unless the '$(OBJECTS)' exports something, this could create no 'lib/foo_imp.lib' file.",
        "#",
        *_make_rule("lib/foo_imp.lib", "bin/foo.dll"),
        *_make_rule(
            "bin/foo.dll",
            "$(OBJECTS) | bin lib",
            ["$(call link_DLL, $@, $^ $(EX_LIBS), lib/foo_imp.lib)"],
        ),
    ]
    generated = [
        _make_rule(
            f"$(OBJ_DIR)/{name}",
            "$(THIS_FILE) | $(OBJ_DIR)",
            ["$(call generate, $@,//)", f"$(file >> $@,$({macro}))"],
        )
        for name, macro in (("config.h", "CONFIG_H"), ("foo.rc", "FOO_RC"))
    ]
    return [
        _make_rule(
            "all",
            "$(GENERATED) $(TARGETS)",
            [_green("Welcome to 'TARGETS' (CC=$(CC)).")],
        ),
        _make_rule("$(OBJ_DIR) bin lib", "", ["mkdir --parents $(OBJ_DIR)"]),
        _make_rule(
            "bin/foo.exe",
            "$(OBJECTS) | bin #! maybe add a '$(OBJ_DIR)/foo.res' here?",
            ["$(call link_EXE, $@, $^ $(EX_LIBS))"],
        ),
        dll_block,
        ["%c", *_banner("Link $(TARGETS) with this instead?"), "LIB_OBJ ?="],
        _make_rule("lib/foo.lib", "$(LIB_OBJ) | lib", ["$(call create_static_lib, $@, $(LIB_OBJ))"]),
        _make_rule("$(OBJ_DIR)/%.res", "%.rc | $(OBJ_DIR)", ["$(call create_res_file, $@, $<)"]),
        *generated,
        _make_rule(
            "install",
            "$(TARGETS)",
            ["cp --update $(TARGETS) $(TARGETS:.exe=.pdb) $(INSTALL_ROOT)/bin", "@echo"],
        ),
        _make_rule("clean", "", ["rm -f $(GENERATED) link.tmp", "rm -fr $(OBJ_DIR)"]),
        _make_rule("vclean realclean", "clean", ["rm -f .depend.Windows", "rm -fr bin lib"]),
        _make_rule(
            "%.i",
            "%.c $(OBJ_DIR)/cpp-filter.py $(GENERATED) FORCE",
            ["$(call C_preprocess, $@, $<)"],
        ),
        _make_rule("FORCE", ""),
        _make_rule(
            "$(OBJ_DIR)/cpp-filter.py",
            "$(THIS_FILE) | $(OBJ_DIR)",
            [
                "$(call generate, $@, #)",
                "$(file >> $@,if 1:)",
                "$(file >> $@,$(cpp_filter_PY))",
            ],
        ),
    ]


def _macros() -> list[list[str]]:
    warning_tail = "from $(realpath $(THIS_FILE)) at $(TODAY). Edit that file instead."
    return [
        _banner("GNU-make macros:")
        + ["# This assumes you have CygWin/Msys's 'echo' with colour support.", "#"]
        + _aligned([
            ("BRIGHT_GREEN", "=", "\\e[1;32m"),
            ("BRIGHT_WHITE", "=", "\\e[1;37m"),
        ]),
        _aligned([
            ("colour_msg", "=", '@echo -e "$(1)\\e[0m"'),
            ("green_msg", "=", "$(call colour_msg,$(BRIGHT_GREEN)$(strip $(1)))"),
        ]),
        _define("generate", [
            _green("Generating $(1)"),
            "$(file > $(1),$(call Warning,$(2)))",
        ]),
        _define("Warning", [
            "$(1)",
            "$(1) DO NOT EDIT! This file was automatically generated",
            f"$(1) {warning_tail}",
            "$(1)",
        ]),
        _define("create_resp_file", [
            "$(file > $(1))",
            "$(foreach f, $(2), $(file >> $(1),$(strip $(f))) )",
        ]),
        _define("C_compile", ["$(CC) -c $(CFLAGS) -Fo./$(strip $(1) $(2))", "@echo"]),
        _define("link_EXE", [
            _green("Linking $(1)"),
            "link $(LDFLAGS) -out:$(strip $(1)) $(2) > link.tmp",
            "@cat link.tmp >> $(1:.exe=.map)",
            "@echo",
        ]),
        _define("link_DLL", [
            _green("Linking $(1)"),
            "link $(LDFLAGS) -dll -out:$(strip $(1)) -implib:$(strip $(3)) $(2) > link.tmp",
            "@cat link.tmp >> $(1:.dll=.map)",
            "@rm -f $(3:.lib=.exp)",
            "@echo",
        ]),
        _define("create_static_lib", [
            _green("Creating static library $(1)"),
            "rm -f $(1)",
            "lib -nologo -out:$(strip $(1)) -machine:$(CPU) $(2)",
            "@echo",
        ]),
        _define("create_res_file", [
            _green("Creating $(1)"),
            "rc $(RCFLAGS) -Fo./$(strip $(1)) $(2)",
            "@echo",
        ]),
        _banner("clang-cl: /d1PP  Retain macro definitions in /E mode")
        + _conditional("ifeq ($(CC),clang-cl)", ["d1PP = -d1PP"], ["d1PP ="]),
        _conditional(
            "ifeq ($(USE_ASTYLE),1)",
            _aligned([
                ("pp_filter", "=", "| astyle"),
                ("pp_comment", "=", "The preprocessed and Astyled output of $(strip $(1))"),
            ]),
            _aligned([
                ("pp_filter", "=", ""),
                ("pp_comment", "=", "The raw preprocessed output of $(strip $(1))"),
            ]),
        ),
        _define("C_preprocess", [
            "$(file  > $(1), /* $(call pp_comment, $(2)) */)",
            "$(file >> $(1),  * $(CC) -E)",
            "$(foreach f, $(CFLAGS), $(file >> $(1),  *   $(f)))",
            "$(file >> $(1), " + "-" * 33 + ")",
            "$(file >> $(1),  */)",
            "$(CC) -E $(CFLAGS) $(d1PP) $(2) | $(PYTHON) $(OBJ_DIR)/cpp-filter.py $(pp_filter) >> $(1)",
        ]),
    ]


def _config_h() -> list[str]:
    guards = chain.from_iterable(
        (f"#ifndef {macro}", f"#define {macro}", "#endif") for macro in _CRT_MACROS
    )
    return _define("CONFIG_H", [
        "#pragma once",
        "#define WIN32_LEAN_AND_MEAN",
        "",
        *guards,
        "/* !Add more stuff here... */",
    ])


def _foo_rc() -> list[str]:
    version_info = (
        ("FILEVERSION", "RC_VERSION"),
        ("PRODUCTVERSION", "RC_VERSION"),
        ("FILEFLAGSMASK", "0x3FL"),
        ("FILEOS", "VOS__WINDOWS32"),
        ("FILETYPE", "VFT_APP"),
        ("FILESUBTYPE", "0x0L"),
        ("FILEFLAGS", "RC_FILEFLAGS"),
    )
    string_info = (
        ("CompanyName", '"http://www.example.com/"'),
        ("FileDescription", '"foo-bar (" RC_HOST RC_DBG_REL ")."'),
        ("FileVersion", '"$(VERSION)."'),
        ("InternalName", '"foo-bar."'),
        ("LegalCopyright", '"Change this."'),
        ("Comments", '"Built on $(TODAY) by ..."'),
    )
    values = []
    for key, value in string_info:
        quoted = '"' + key + '",'
        values.append(f"VALUE {quoted.ljust(18)} {value}")

    resources = [
        *_rc_block('BLOCK "StringFileInfo"', _rc_block('BLOCK "040904B0"', values)),
        "",
        *_rc_block('BLOCK "VarFileInfo"', ['VALUE "Translation", 0x409, 1200']),
    ]
    body = [
        "#include <winver.h>",
        "",
        "#if defined(__clang__)",
        "  " + _cdef("RC_HOST", '"clang"', 15),
        "#elif defined(_MSC_VER)",
        "  " + _cdef("RC_HOST", '"MSVC"', 15),
        "#else",
        '  #error "Unsupported compiler"',
        "#endif",
        "",
        _cdef("RC_VERSION", "$(VER_MAJOR),$(VER_MINOR),$(VER_PATCH),0", 14),
        "",
        "#ifdef _DEBUG",
        *_indent([_cdef("RC_FILEFLAGS", "1", 13), _cdef("RC_DBG_REL", '", debug"', 13)]),
        "#else",
        *_indent([_cdef("RC_FILEFLAGS", "0", 13), _cdef("RC_DBG_REL", '", release"', 13)]),
        "#endif",
        "",
        "LANGUAGE  0x09,0x01",
        "",
        "VS_VERSION_INFO VERSIONINFO",
        *_indent(f"{key.ljust(14)} {value}" for key, value in version_info),
        "",
        "BEGIN",
        *_indent(resources),
        "END",
    ]
    return _define("FOO_RC", body)


def _cpp_filter() -> list[str]:
    # (indent, text) pairs for the preprocessor output filter script.
    script = (
        (0, "import sys, os"),
        (0, ""),
        (0, "empty_lines = 0"),
        (0, "while True:"),
        (2, "line = sys.stdin.readline()"),
        (2, "if not line:"),
        (5, "break"),
        (2, "line = line.rstrip()"),
        (2, "if line == '':"),
        (5, "empty_lines += 1"),
        (5, "continue"),
        (0, ""),
        (2, "#"),
        (2, "# MSVC or clang-cl 'line' directive"),
        (2, "#"),
        (2, "if line.startswith('#line') or line.startswith('# '):"),
        (5, r"line = line.replace (r'\\', '/')"),
        (0, ""),
        (2, "print (line)"),
        (0, ""),
        (2, "#"),
        (2, "# Print a newline after a functions or structs"),
        (2, "#"),
        (2, "if line == '}' or line == '};':"),
        (5, "print ('')"),
        (0, ""),
        (0, "print ('Removed %d empty lines.' % empty_lines, file=sys.stderr)"),
    )
    return _define("cpp_filter_PY", [" " * depth + text if text else "" for depth, text in script])


def _depend() -> list[list[str]]:
    return [
        _aligned([
            ("DEP_CFLAGS", "=", "-MM $(filter -I% -D%, $(CFLAGS))"),
            ("DEP_REPLACE", "=", r"sed -e 's/\(.*\)\.o: /\n$$(OBJ_DIR)\/\1.obj: /'"),
        ]),
        _make_rule(
            "depend",
            "$(GENERATED)",
            ["gcc $(DEP_CFLAGS) $(SOURCES) | $(DEP_REPLACE) > .depend.Windows"],
        ),
        ["-include .depend.Windows"],
    ]


def _build_template() -> tuple[str, ...]:
    return tuple(_join(
        _header(),
        _version(),
        ["%v"],
        *_settings(),
        *_flags(),
        *_targets(),
        *_macros(),
        _config_h(),
        _foo_rc(),
        _cpp_filter(),
        *_depend(),
    ))


MAKE_TEMPLATE: tuple[str, ...] = _build_template()


def _compile_rule(suffix: str, args: str) -> str:
    lines = _make_rule(
        "$(OBJ_DIR)/%.obj",
        f"%.{suffix} | $(OBJ_DIR)",
        [f"$(call C_compile, $@, {args})"],
    )
    return "\n".join(lines) + "\n"


_CXX_ARGS = "$(CXXFLAGS) $<"

C_RULE = _compile_rule("c", "$<")
CC_RULE = _compile_rule("cc", _CXX_ARGS)
CPP_RULE = _compile_rule("cpp", _CXX_ARGS)
CXX_RULE = _compile_rule("cxx", _CXX_ARGS)

RULES: dict[str, str] = {
    "c": C_RULE,
    "cc": CC_RULE,
    "cpp": CPP_RULE,
    "cxx": CXX_RULE,
}


def rule_for(kind: object) -> str:
    """Return the compile rule for a source kind.

    ``kind`` is an extension such as ``"c"`` or ``".cpp"``, or an enum member
    whose value is one. Raises ValueError for a kind that is not compiled.
    """
    key = str(getattr(kind, "value", kind)).lower().lstrip(".")
    try:
        return RULES[key]
    except KeyError:
        raise ValueError(f"no compile rule for source kind {kind!r}") from None