[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flakegen"
version = "0.1.0"
description = "Time-ordered 64-bit unique ID generation with region and worker partitioning"
requires-python = ">=3.10"
dependencies = []
keywords = ["snowflake", "id", "unique-id", "distributed", "generator"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
flakegen = "flakegen.module:main"

[tool.hatch.build.targets.wheel]
packages = ["flakegen"]

[tool.hatch.build.targets.sdist]
include = ["flakegen", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
