"""Editable text buffer with a cursor, a scrolling viewport and vim-style motions."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

_WHITESPACE = frozenset(" \t\n\r")


class Mode(enum.Enum):
    """Editing mode of the editor tab."""

    NORMAL = "normal"
    INSERT = "insert"


class Tab(enum.Enum):
    """Which tab of the editor is showing."""

    EDITOR = "editor"
    PREVIEW = "preview"


@dataclass
class Position:
    """A cursor position as a zero-based row and column."""

    row: int = 0
    col: int = 0


@dataclass
class Viewport:
    """The first visible row and column of the editor area."""

    offset_row: int = 0
    offset_col: int = 0


def is_whitespace(char: str) -> bool:
    """Return True for space, tab, newline and carriage return."""
    return char in _WHITESPACE


def save_lines(filename: str | Path, lines: Iterable[str]) -> Path:
    """Write ``lines`` joined by newlines, keeping a ``.bak`` copy of any old file.

    Failing to make the backup is ignored; failing to write the file raises OSError.
    """
    path = Path(filename)
    if path.exists():
        try:
            Path(f"{path}.bak").write_bytes(path.read_bytes())
        except OSError:
            pass
    path.write_bytes("\n".join(lines).encode("utf-8"))
    return path


@dataclass
class Buffer:
    """Lines of text with a cursor and the viewport that keeps it visible.

    Editing and motion methods change the text and cursor only; callers
    call :meth:`adjust_viewport` afterwards when the view should follow.
    """

    content: list[str] = field(default_factory=lambda: [""])
    cursor: Position = field(default_factory=Position)
    viewport: Viewport = field(default_factory=Viewport)
    width: int = 80
    height: int = 24
    saved: bool = True

    def __post_init__(self) -> None:
        if not self.content:
            self.content = [""]

    @classmethod
    def from_text(cls, text: str) -> "Buffer":
        """Build a buffer from text, ignoring one trailing newline."""
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return cls(content=lines or [""])

    def text(self) -> str:
        """Return the content joined by newlines."""
        return "\n".join(self.content)

    def content_height(self) -> int:
        """Rows available for text: the height less tab bar, status bar and footer."""
        return max(1, self.height - 3)

    @property
    def _line(self) -> str:
        return self.content[self.cursor.row]

    def ensure_cursor_bounds(self) -> None:
        """Clamp the cursor to an existing row and a column within that row."""
        if not self.content:
            self.content = [""]
        self.cursor.row = min(max(self.cursor.row, 0), len(self.content) - 1)
        self.cursor.col = min(max(self.cursor.col, 0), len(self._line))

    def adjust_viewport(self, clamp_bottom: bool = False) -> None:
        """Scroll so the cursor is visible.

        With ``clamp_bottom`` the view never scrolls past the last screenful.
        """
        self.ensure_cursor_bounds()

        height = self.content_height()
        row = self.cursor.row
        if row < self.viewport.offset_row:
            self.viewport.offset_row = row
        elif row >= self.viewport.offset_row + height:
            self.viewport.offset_row = row - height + 1
        self.viewport.offset_row = max(0, self.viewport.offset_row)
        if clamp_bottom:
            self.viewport.offset_row = min(
                self.viewport.offset_row, max(0, len(self.content) - height)
            )

        width = max(1, self.width - 3)
        col = self.cursor.col
        if col < self.viewport.offset_col:
            self.viewport.offset_col = col
        elif col >= self.viewport.offset_col + width:
            self.viewport.offset_col = col - width + 1
        self.viewport.offset_col = max(0, self.viewport.offset_col)

    # Motions

    def move_left(self) -> None:
        """Move one column left, stopping at the line start."""
        if self.cursor.col > 0:
            self.cursor.col -= 1

    def move_right(self) -> None:
        """Move one column right, stopping just past the line end."""
        if self.cursor.row < len(self.content) and self.cursor.col < len(self._line):
            self.cursor.col += 1

    def move_up(self) -> None:
        """Move one row up, clamping the column to the new line."""
        if self.cursor.row > 0:
            self.cursor.row -= 1
            self.cursor.col = min(self.cursor.col, len(self._line))

    def move_down(self) -> None:
        """Move one row down, clamping the column to the new line."""
        if self.cursor.row < len(self.content) - 1:
            self.cursor.row += 1
            self.cursor.col = min(self.cursor.col, len(self._line))

    def line_start(self) -> None:
        """Move to the first column."""
        self.cursor.col = 0

    def line_end(self) -> None:
        """Move past the last character of the line."""
        self.cursor.col = len(self._line)

    def go_top(self) -> None:
        """Move to the start of the first line."""
        self.cursor.row = 0
        self.cursor.col = 0

    def go_bottom(self) -> None:
        """Move to the end of the last line."""
        self.cursor.row = len(self.content) - 1
        self.cursor.col = len(self._line)

    # Edits

    def open_below(self) -> None:
        """Insert an empty line below the cursor and move onto it."""
        self.content.insert(self.cursor.row + 1, "")
        self.cursor.row += 1
        self.cursor.col = 0
        self.saved = False

    def open_above(self) -> None:
        """Insert an empty line at the cursor row and move to its start."""
        self.content.insert(self.cursor.row, "")
        self.cursor.col = 0
        self.saved = False

    def delete_char(self) -> None:
        """Delete the character under the cursor, or join the next line at the end."""
        row, col = self.cursor.row, self.cursor.col
        line = self._line
        if col < len(line):
            self.content[row] = line[:col] + line[col + 1 :]
            self.saved = False
        elif row < len(self.content) - 1:
            self.content[row] = line + self.content.pop(row + 1)
            self.saved = False

    def backspace(self) -> None:
        """Delete the character before the cursor, or join onto the previous line."""
        row, col = self.cursor.row, self.cursor.col
        if col > 0:
            line = self._line
            self.content[row] = line[: col - 1] + line[col:]
            self.cursor.col -= 1
            self.saved = False
        elif row > 0:
            previous = self.content[row - 1]
            self.content[row - 1] = previous + self.content.pop(row)
            self.cursor.row -= 1
            self.cursor.col = len(previous)
            self.saved = False

    def split_line(self) -> None:
        """Break the line at the cursor and move to the start of the new line."""
        row, col = self.cursor.row, self.cursor.col
        line = self._line
        self.content[row] = line[:col]
        self.content.insert(row + 1, line[col:])
        self.cursor.row += 1
        self.cursor.col = 0
        self.saved = False

    def insert_char(self, char: str) -> None:
        """Insert a single character at the cursor and move past it."""
        if len(char) != 1:
            raise ValueError(f"expected a single character, got {char!r}")
        line = self._line
        col = self.cursor.col
        self.content[self.cursor.row] = line[:col] + char + line[col:]
        self.cursor.col += 1
        self.saved = False

    def insert_text(self, text: str) -> int:
        """Insert possibly multi-line text at the cursor; return the line count inserted.

        The cursor ends just after the inserted text. Empty text changes nothing.
        """
        if not text:
            return 0
        self.ensure_cursor_bounds()
        row, col = self.cursor.row, self.cursor.col
        line = self._line
        pieces = text.split("\n")
        if len(pieces) == 1:
            self.content[row] = line[:col] + text + line[col:]
            self.cursor.col += len(text)
        else:
            middle = pieces[1:-1]
            self.content[row : row + 1] = [
                line[:col] + pieces[0],
                *middle,
                pieces[-1] + line[col:],
            ]
            self.cursor.row += len(pieces) - 1
            self.cursor.col = len(pieces[-1])
            self.ensure_cursor_bounds()
        self.saved = False
        return len(pieces)

    def delete_line(self) -> None:
        """Remove the cursor line; the last remaining line is emptied instead."""
        if len(self.content) > 1:
            del self.content[self.cursor.row]
            self.cursor.row = min(self.cursor.row, len(self.content) - 1)
            self.cursor.col = min(self.cursor.col, len(self._line))
        else:
            self.content[0] = ""
            self.cursor.col = 0
        self.saved = False

    # Word motions

    def next_word(self) -> Position:
        """Return the start of the next word, continuing onto the next line."""
        row, col = self.cursor.row, self.cursor.col
        if row >= len(self.content):
            return Position(len(self.content) - 1, len(self.content[-1]))

        line = self.content[row]
        while col < len(line) and not is_whitespace(line[col]):
            col += 1
        while col < len(line) and is_whitespace(line[col]):
            col += 1

        if col >= len(line) and row < len(self.content) - 1:
            row += 1
            col = 0
            line = self.content[row]
            while col < len(line) and is_whitespace(line[col]):
                col += 1
        return Position(row, col)

    def prev_word(self) -> Position:
        """Return the start of the previous word, or the end of the previous line."""
        row, col = self.cursor.row, self.cursor.col
        if row >= len(self.content) or row < 0:
            return Position(0, 0)

        if col > 0:
            col -= 1
        elif row > 0:
            row -= 1
            col = len(self.content[row])

        line = self.content[row]
        while 0 < col < len(line) and is_whitespace(line[col]):
            col -= 1
        while 0 < col < len(line) and not is_whitespace(line[col]):
            col -= 1
        if 0 < col < len(line) and is_whitespace(line[col]):
            col += 1
        return Position(row, col)

    def end_of_word(self) -> Position:
        """Return the last character of the current or next word on this line."""
        row, col = self.cursor.row, self.cursor.col
        if row >= len(self.content):
            return Position(len(self.content) - 1, len(self.content[-1]))

        line = self.content[row]
        if col < len(line) and not is_whitespace(line[col]):
            while col < len(line) and not is_whitespace(line[col]):
                col += 1
            return Position(row, max(0, col - 1) if col > 0 else col)

        while col < len(line) and is_whitespace(line[col]):
            col += 1
        while col < len(line) and not is_whitespace(line[col]):
            col += 1
        if col > 0:
            col -= 1
        return Position(row, col)