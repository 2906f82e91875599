[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reefdb"
version = "0.1.0"
description = "Table storage engines, transaction state tracking, savepoints and a write-ahead log for a small relational database"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "storage", "write-ahead-log", "transactions", "savepoints", "mmap"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["reefdb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
