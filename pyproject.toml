[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ifjvm"
version = "0.1.0"
description = "Symbol tables, a three-address instruction set, an interpreter and a declaration pass for the IFJ16 language"
requires-python = ">=3.10"
dependencies = []
keywords = ["interpreter", "virtual machine", "symbol table", "parser", "IFJ16"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ifjvm"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
