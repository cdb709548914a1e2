[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hani"
version = "1.2.6"
description = "A terminal markdown editor with vim-like bindings and a rendered preview tab"
requires-python = ">=3.10"
keywords = ["markdown", "editor", "terminal", "tui", "vim", "preview"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "pygments",
    "rich",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
hani = "hani.cli:main"
hani-diy = "hani.diy:main"

[tool.hatch.build.targets.wheel]
packages = ["hani"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
