"""Version information and command-line help text."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

VERSION = "1.2.6"
BUILD_DATE = "2025-01-16"
GIT_COMMIT = "dev"


@dataclass(frozen=True)
class VersionInfo:
    """Release and runtime details."""

    version: str
    build_date: str
    git_commit: str
    python_version: str
    system: str
    arch: str


def get_version_info() -> VersionInfo:
    """Return complete version information."""
    return VersionInfo(
        version=VERSION,
        build_date=BUILD_DATE,
        git_commit=GIT_COMMIT,
        python_version=platform.python_version(),
        system=sys.platform,
        arch=platform.machine() or "unknown",
    )


def version_text() -> str:
    """Return the full version report."""
    info = get_version_info()
    lines = [
        f"Hani Markdown Editor v{info.version}",
        f"Built: {info.build_date}",
    ]
    if info.git_commit != "dev":
        lines.append(f"Commit: {info.git_commit}")
    lines.append(f"Python: {info.python_version}")
    lines.append(f"Platform: {info.system}/{info.arch}")
    return "\n".join(lines) + "\n"


_HELP_BODY = """\
USAGE:
  hani [filename]     Start editor with optional file
  hani -v, --version  Show version information
  hani -h, --help     Show this help message

EXAMPLES:
  hani                Create a new markdown file
  hani README.md      Edit an existing file
  hani document.md    Create or edit document.md

KEY BINDINGS:
  Tab/Shift+Tab       Switch between editor and preview
  Ctrl+S              Save file
  Ctrl+Q              Quit application
  i                   Enter insert mode
  Esc                 Return to normal mode
  h,j,k,l             Navigate (left, down, up, right)
  w,b,e               Word movements
  0,$                 Line beginning/end
  gg,G                File beginning/end
  o,O                 Insert new line
  x,dd                Delete operations
"""


def help_text() -> str:
    """Return the usage message."""
    return f"Hani - A TUI Markdown Editor v{VERSION}\n\n{_HELP_BODY}"


def _emit(text: str) -> None:
    out = sys.stdout
    out.write(text)
    out.flush()


def print_version() -> None:
    """Print the full version report."""
    text = version_text()
    _emit(text)


def print_version_short() -> None:
    """Print just the version number."""
    text = f"v{VERSION}\n"
    _emit(text)


def print_help() -> None:
    """Print the usage message."""
    text = help_text()
    _emit(text)