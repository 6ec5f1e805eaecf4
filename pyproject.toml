[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bdindex"
version = "0.1.0"
description = "Storage layer and JSON action endpoints for a blockchain explorer index of validators, coins and staking data"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "blockchain",
    "indexer",
    "explorer",
    "staking",
    "validators",
    "database",
    "sqlite",
]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bdindex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
