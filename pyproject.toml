[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fuzzyfind"
version = "1.1.0"
description = "A simple fuzzy text selector for the terminal with an accurate scoring algorithm"
requires-python = ">=3.10"
dependencies = []
keywords = ["fuzzy", "finder", "selector", "terminal", "search", "matching"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[project.scripts]
fuzzyfind = "fuzzyfind.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fuzzyfind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
