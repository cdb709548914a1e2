"""A self-contained full-screen markdown editor drawn with raw escape sequences."""

from __future__ import annotations

import re
import signal
import sys
import time
from collections.abc import Callable, Iterable
from functools import partial
from pathlib import Path
from typing import Protocol

from hani.buffer import Buffer, Mode, Tab, save_lines
from hani.clipboard import WAYLAND_FIRST, get_clipboard
from hani.preview import PreviewRenderer, max_preview_offset
from hani.terminal import (
    CLEAR_LINE,
    CLEAR_SCREEN,
    DELETE,
    DOWN,
    ESC,
    HIDE_CURSOR,
    LEFT,
    RESET,
    REVERSE,
    RIGHT,
    SHOW_CURSOR,
    UP,
    RawTerminal,
    move_to,
    terminal_size,
)

STATUS_DURATION = 3.0
UNTITLED = "untitled.md"

CTRL_Q = "\x11"
CTRL_S = "\x13"
CTRL_V = "\x16"
TAB_KEY = "\t"
ENTER = "\r"
ESCAPE = "\x1b"
BACKSPACES = frozenset({"\x7f", "\x08"})

_TILDE = "\x1b[34m~\x1b[0m"
_ARROW_DIRECTIONS = {UP: "k", DOWN: "j", RIGHT: "l", LEFT: "h"}
_ANSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_ANSI_SPLIT = re.compile(r"(\x1b\[[0-9;?]*[A-Za-z])")

_INSERT_FOOTER = " Ctrl+V Paste │ Esc Normal │ Tab Preview │ Ctrl+S Save │ Ctrl+Q Quit"
_NORMAL_FOOTER = (
    " i Insert │ Tab Preview │ Ctrl+S Save │ o New Line │ d Delete Line │ Ctrl+Q Quit"
)
_PREVIEW_FOOTER = " j/k Scroll │ Tab Editor │ g Top │ G Bottom │ Ctrl+Q Quit"


class _Terminal(Protocol):
    def read_keys(self) -> Iterable[str]: ...

    def write(self, text: str) -> object: ...


def _read_lines(filename: str) -> list[str]:
    if not filename:
        return []
    try:
        text = Path(filename).read_bytes().decode("utf-8", errors="replace")
    except OSError:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _clip(line: str, width: int) -> str:
    """Cut ``line`` to ``width`` visible characters, keeping escape sequences."""
    parts: list[str] = []
    used = 0
    for piece in _ANSI_SPLIT.split(line):
        if _ANSI.fullmatch(piece):
            parts.append(piece)
            continue
        taken = piece[: max(0, width - used)]
        parts.append(taken)
        used += len(taken)
    return "".join(parts)


class TerminalEditor:
    """Vim-style markdown editor with an editor tab and a rendered preview tab."""

    def __init__(
        self,
        filename: str = "",
        *,
        width: int = 80,
        height: int = 24,
        clipboard: Callable[[], str] | None = None,
    ) -> None:
        self.filename = filename
        self.buffer = Buffer(
            content=_read_lines(filename) or [""], width=width, height=height, saved=True
        )
        self.mode = Mode.NORMAL
        self.active_tab = Tab.EDITOR
        try:
            self.renderer: PreviewRenderer | None = PreviewRenderer(width - 4)
        except ValueError:
            self.renderer = None
        self.preview_offset = 0
        self.status_msg = ""
        self.status_expiry = 0.0
        self.clipboard = (
            clipboard if clipboard is not None else partial(get_clipboard, WAYLAND_FIRST)
        )

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def set_status(self, msg: str) -> None:
        """Show ``msg`` in the status bar for a few seconds."""
        self.status_msg = msg
        self.status_expiry = time.monotonic() + STATUS_DURATION

    # Drawing

    def render(self) -> str:
        """Return the escape sequences that redraw the whole screen."""
        content_height = self.height - 3
        editing = self.active_tab is Tab.EDITOR
        parts = [HIDE_CURSOR, CLEAR_SCREEN, self._tab_bar()]
        if editing:
            parts.append(self._editor_rows(content_height))
        else:
            parts.append(self._preview_rows(content_height))
        parts.append(self._status_bar())
        parts.append(self._footer())

        if editing:
            cursor = self.buffer.cursor
            viewport = self.buffer.viewport
            row = cursor.row - viewport.offset_row + 2
            col = cursor.col - viewport.offset_col + 1
            if 1 < row <= content_height + 1 and col > 0:
                parts.extend((move_to(row, col), SHOW_CURSOR))
            else:
                parts.append(HIDE_CURSOR)
        else:
            parts.append(HIDE_CURSOR)
        return "".join(parts)

    def _tab_bar(self) -> str:
        editor, preview = " Editor ", " Preview "
        if self.active_tab is Tab.EDITOR:
            editor = f"{REVERSE}{editor}{RESET}"
        else:
            preview = f"{REVERSE}{preview}{RESET}"
        return f"{move_to(1, 1)}{CLEAR_LINE}{editor}│{preview}"

    def _editor_rows(self, height: int) -> str:
        content = self.buffer.content
        viewport = self.buffer.viewport
        rows: list[str] = []
        for index in range(height):
            rows.append(move_to(index + 2, 1) + CLEAR_LINE)
            line_num = viewport.offset_row + index
            if line_num >= len(content):
                rows.append(_TILDE)
                continue
            visible = content[line_num][viewport.offset_col :]
            rows.append(visible[: self.width])
        return "".join(rows)

    def _preview_rows(self, height: int) -> str:
        if self.renderer is None:
            return move_to(2, 1) + "Preview not available (renderer failed)"
        markdown = self.buffer.text()
        if not markdown.strip():
            return move_to(2, 1) + "No content to preview"
        try:
            rendered = self.renderer.render(markdown)
        except Exception as exc:  # a renderer failure is shown instead of the preview
            return move_to(2, 1) + f"Error rendering markdown: {exc}"

        lines = rendered.split("\n")
        offset = max(0, self.preview_offset)
        limit = max_preview_offset(len(lines), height)
        if offset > limit:
            offset = limit
            self.preview_offset = offset

        rows: list[str] = []
        for index in range(height):
            rows.append(move_to(index + 2, 1) + CLEAR_LINE)
            line_index = offset + index
            if line_index < len(lines):
                rows.append(_clip(lines[line_index], self.width))
        return "".join(rows)

    def _status_bar(self) -> str:
        out = move_to(self.height - 1, 1) + CLEAR_LINE
        if time.monotonic() > self.status_expiry:
            self.status_msg = ""
        if self.status_msg:
            return out + f"{REVERSE} {self.status_msg} {RESET}"
        mode = "INSERT" if self.mode is Mode.INSERT else "NORMAL"
        dirty = "" if self.buffer.saved else " [+]"
        out += f"{REVERSE} {mode}   {self.filename}{dirty} {RESET}"
        if self.active_tab is Tab.EDITOR:
            cursor = self.buffer.cursor
            out += f"{REVERSE} ({cursor.row + 1},{cursor.col + 1}) {RESET}"
        return out

    def _footer(self) -> str:
        if self.active_tab is Tab.EDITOR:
            text = _INSERT_FOOTER if self.mode is Mode.INSERT else _NORMAL_FOOTER
        else:
            text = _PREVIEW_FOOTER
        return move_to(self.height, 1) + CLEAR_LINE + text

    # Input

    def _dispatch(self, key: str) -> bool:
        if key == DELETE:
            if self.active_tab is Tab.EDITOR and self.mode is Mode.INSERT:
                self.handle_delete_key()
            return False
        if key in _ARROW_DIRECTIONS:
            if self.active_tab is Tab.EDITOR:
                direction = _ARROW_DIRECTIONS[key]
                if self.mode is Mode.INSERT:
                    self.handle_arrow_key(direction)
                else:
                    self._normal_key(direction)
            return False
        if key == ESC:
            self.handle_escape()
            return False
        return self.handle_key(key)

    def handle_key(self, key: str) -> bool:
        """Handle one typed character; return True when it asks to quit."""
        if len(key) != 1:
            raise ValueError(f"expected a single character, got {key!r}")
        if key == CTRL_Q:
            return True
        if key == CTRL_S:
            self.save_file()
            return False
        if key == TAB_KEY:
            self.active_tab = Tab.PREVIEW if self.active_tab is Tab.EDITOR else Tab.EDITOR
            return False
        if self.active_tab is Tab.EDITOR:
            if self.mode is Mode.NORMAL:
                self._normal_key(key)
            else:
                self._insert_key(key)
        else:
            self._preview_key(key)
        return False

    def handle_escape(self) -> None:
        """Leave insert mode, stepping the cursor back one column."""
        if self.active_tab is Tab.EDITOR and self.mode is Mode.INSERT:
            self.mode = Mode.NORMAL
            self.buffer.move_left()
            self.buffer.adjust_viewport()

    def _normal_key(self, key: str) -> None:
        buf = self.buffer
        follow = True
        match key:
            case "h":
                buf.move_left()
            case "j":
                buf.move_down()
            case "k":
                buf.move_up()
            case "l":
                buf.move_right()
            case "0":
                buf.line_start()
            case "$":
                buf.line_end()
            case "g":
                buf.go_top()
            case "G":
                buf.go_bottom()
            case "i":
                self.mode = Mode.INSERT
                follow = False
            case "a":
                self.mode = Mode.INSERT
                buf.move_right()
                follow = False
            case "A":
                self.mode = Mode.INSERT
                buf.line_end()
                follow = False
            case "o":
                self.mode = Mode.INSERT
                buf.open_below()
            case "O":
                self.mode = Mode.INSERT
                buf.open_above()
            case "x":
                buf.delete_char()
                follow = False
            case "d":
                buf.delete_line()
            case "w":
                buf.cursor = buf.next_word()
            case "b":
                buf.cursor = buf.prev_word()
            case "e":
                buf.cursor = buf.end_of_word()
            case _:
                follow = False
        if follow:
            buf.adjust_viewport()

    def _insert_key(self, key: str) -> None:
        buf = self.buffer
        if key == ESCAPE:
            self.mode = Mode.NORMAL
            buf.move_left()
        elif key == CTRL_V:
            self.paste_from_clipboard()
        elif key in BACKSPACES:
            buf.backspace()
            buf.adjust_viewport()
        elif key == ENTER:
            buf.split_line()
            buf.adjust_viewport()
        elif " " <= key <= "~":
            buf.insert_char(key)

    def _rendered_lines(self) -> list[str]:
        if self.renderer is None:
            return []
        try:
            return self.renderer.render_lines(self.buffer.content)
        except Exception:  # scrolling simply stops when the preview cannot render
            return []

    def _preview_key(self, key: str) -> None:
        height = self.height - 3
        match key:
            case "j":
                lines = self._rendered_lines()
                if lines and self.preview_offset < max_preview_offset(len(lines), height):
                    self.preview_offset += 1
            case "k":
                if self.preview_offset > 0:
                    self.preview_offset -= 1
            case "g":
                self.preview_offset = 0
            case "G":
                lines = self._rendered_lines()
                if lines:
                    self.preview_offset = max_preview_offset(len(lines), height)

    def handle_delete_key(self) -> None:
        """Delete the character at the cursor, joining the next line at the end."""
        self.buffer.delete_char()
        self.buffer.adjust_viewport()

    def handle_arrow_key(self, direction: str) -> None:
        """Move the cursor one step in insert mode; ``direction`` is h, j, k or l."""
        buf = self.buffer
        match direction:
            case "h":
                buf.move_left()
            case "j":
                buf.move_down()
            case "k":
                buf.move_up()
            case "l":
                buf.move_right()
        buf.adjust_viewport()

    def paste_from_clipboard(self, text: str | None = None) -> int:
        """Insert ``text`` (by default the clipboard) and return its line count."""
        if text is None:
            text = self.clipboard()
        if not text:
            self.set_status("Clipboard empty")
            return 0
        count = self.buffer.insert_text(text)
        self.buffer.adjust_viewport()
        if count > 1:
            self.set_status(f"Pasted {count} lines")
        return count

    def save_file(self) -> bool:
        """Write the buffer to its file, naming it ``untitled.md`` if unnamed."""
        if not self.filename:
            self.filename = UNTITLED
        try:
            save_lines(self.filename, self.buffer.content)
        except OSError as exc:
            self.set_status(f"Error saving file: {exc}")
            return False
        self.buffer.saved = True
        self.set_status(f"File saved: {self.filename}")
        return True

    def run(self, terminal: _Terminal) -> None:
        """Draw, then handle keys from ``terminal`` until one asks to quit."""
        terminal.write(self.render())
        for key in terminal.read_keys():
            if self._dispatch(key):
                return
            terminal.write(self.render())


def _exit_on_signal(signum: int, frame: object) -> None:
    raise SystemExit(0)


def main(argv: list[str] | None = None) -> int:
    """Start the editor on the file named by the first argument, if any."""
    args = sys.argv[1:] if argv is None else list(argv)
    filename = args[0] if args else ""
    try:
        width, height = terminal_size()
    except OSError as exc:
        print(
            f"Error creating editor: failed to get terminal size: {exc}", file=sys.stderr
        )
        return 1

    editor = TerminalEditor(filename, width=width, height=height)
    previous = {
        sig: signal.signal(sig, _exit_on_signal)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        with RawTerminal() as terminal:
            editor.run(terminal)
    except (OSError, EOFError) as exc:
        print(f"Editor error: {exc}", file=sys.stderr)
        return 1
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0