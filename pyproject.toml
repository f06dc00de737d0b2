[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "genmake"
version = "1.1.0"
description = "A simple GNU makefile generator for MSVC and clang-cl C/C++ projects"
requires-python = ">=3.10"
dependencies = []
keywords = ["makefile", "build", "msvc", "clang-cl", "generator", "getopt"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gen-make = "genmake.generator:main"
file-tree-walk = "genmake.walk:main"

[tool.hatch.build.targets.wheel]
packages = ["genmake"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
