"""Generate GNU makefiles for MSVC and clang-cl C/C++ projects."""

__version__ = "1.1.0"
__all__ = ["generator", "getopt", "smartlist", "templates", "walk"]