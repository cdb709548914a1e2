"""The full-screen editor model: file loading, layout and screen rendering."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable

from rich.cells import cell_len

from hani.buffer import Buffer, Mode, Tab
from hani.config import DEFAULT_WORD_WRAP, Config, load_config
from hani.highlight import SyntaxHighlighter
from hani.keys import ERROR_MSG_DURATION, STATUS_MSG_DURATION, KeyBindings
from hani.preview import PreviewRenderer

MAX_WORD_WRAP = 120
MIN_WORD_WRAP = 40
WORD_WRAP_MARGIN = 10
CURSOR_BLINK_RATE = 0.5
MAX_FILE_SIZE = 10 * 1024 * 1024
_MB = 1024 * 1024

CURSOR_GLYPH = "█"

_RESET = "\x1b[0m"
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_ANSI_SPLIT_RE = re.compile(r"(\x1b\[[0-9;]*m)")


def _visible_width(text: str) -> int:
    return cell_len(_ANSI_RE.sub("", text))


def _truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` terminal cells, keeping its escape sequences."""
    parts: list[str] = []
    used = 0
    full = False
    for part in _ANSI_SPLIT_RE.split(text):
        if _ANSI_RE.fullmatch(part):
            parts.append(part)
            continue
        for char in part:
            if full:
                break
            width = cell_len(char)
            if used + width > limit:
                full = True
                break
            parts.append(char)
            used += width
    return "".join(parts)


def _hex_rgb(color: str) -> str:
    value = color.lstrip("#")
    red, green, blue = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return f"{red};{green};{blue}"


@dataclass(frozen=True)
class _Style:
    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    padding: int = 0

    def _start(self) -> str:
        codes: list[str] = []
        if self.bold:
            codes.append("1")
        if self.fg is not None:
            codes.append(f"38;2;{_hex_rgb(self.fg)}")
        if self.bg is not None:
            codes.append(f"48;2;{_hex_rgb(self.bg)}")
        return f"\x1b[{';'.join(codes)}m" if codes else ""

    def render(
        self, text: str, width: int | None = None, max_width: int | None = None
    ) -> str:
        pad = " " * self.padding
        body = f"{pad}{text}{pad}"
        if width is not None:
            gap = width - _visible_width(body)
            if gap > 0:
                body += " " * gap
        if max_width is not None:
            body = _truncate(body, max_width)
        start = self._start()
        if not start:
            return body
        return start + body.replace(_RESET, _RESET + start) + _RESET


_ACTIVE_TAB = _Style(fg="#FFFFFF", bg="#7D56F4", bold=True, padding=1)
_INACTIVE_TAB = _Style(fg="#CCCCCC", bg="#3C3C3C", padding=1)
_STATUS_BAR = _Style(fg="#CCCCCC", bg="#1E1E1E", padding=1)
_FOOTER = _Style(fg="#CCCCCC", bg="#2D2D2D", padding=1)
_KEY = _Style(fg="#7D56F4", bold=True)
_SEPARATOR = _Style(fg="#666666")
_ERROR = _Style(fg="#FF6B6B", bold=True)
_TAB_BAR = _Style(bg="#1E1E1E")
_INSERT_MODE = replace(_KEY, fg="#FFFFFF", bg="#7D56F4", padding=1)
_NORMAL_MODE = _Style(fg="#FFFFFF", bg="#4A4A4A", padding=1)


def is_binary_file(data: bytes) -> bool:
    """Guess whether ``data`` is binary from its first 512 bytes."""
    if not data:
        return False
    head = data[:512]
    if 0 in head:
        return True
    non_printable = sum(1 for byte in head if byte < 32 and byte not in (9, 10, 13))
    return non_printable / len(head) > 0.3


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code block: the rows of its opening and closing fences."""

    start: int
    end: int
    lang: str


class Model(KeyBindings):
    """Editor state together with the tab bar, content, status bar and footer."""

    def __init__(
        self,
        filename: str = "",
        *,
        config: Config | None = None,
        clipboard: Callable[[], str] | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        content = [""]
        saved = False
        status = ""
        self.last_error: Exception | None = None

        if filename:
            path = Path(filename)
            try:
                size = path.stat().st_size
            except OSError:
                status = f"New file: {filename}"
            else:
                if size > MAX_FILE_SIZE:
                    status = (
                        f"File too large ({size // _MB} MB). "
                        f"Maximum size is {MAX_FILE_SIZE // _MB} MB"
                    )
                    self.last_error = ValueError(f"file too large: {size} bytes")
                else:
                    try:
                        data = path.read_bytes()
                    except OSError as exc:
                        status = f"Error reading file: {exc}"
                        self.last_error = exc
                    else:
                        if is_binary_file(data):
                            status = f"Cannot edit binary file: {filename}"
                            self.last_error = ValueError("binary file detected")
                        else:
                            content = data.decode("utf-8", errors="replace").split("\n")
                            if content and content[-1] == "":
                                content.pop()
                            saved = True
        else:
            saved = True

        word_wrap = self.config.word_wrap or DEFAULT_WORD_WRAP
        renderer = None
        if MIN_WORD_WRAP < word_wrap < MAX_WORD_WRAP * 2:
            renderer = PreviewRenderer(word_wrap)

        buffer = Buffer(content=content, width=0, height=0, saved=saved)
        super().__init__(buffer, filename=filename, renderer=renderer, clipboard=clipboard)
        self.status_msg = status
        self.status_expiry = time.monotonic() + STATUS_MSG_DURATION
        self.highlighter: SyntaxHighlighter | None = None
        self.cursor_blink = True
        self.code_blocks: list[CodeBlock] = []
        self.code_blocks_dirty = True
        self.rebuild_code_blocks()

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def _refresh(self) -> None:
        if self.status_msg and time.monotonic() > self.status_expiry:
            self.status_msg = ""
        if self.highlighter is None and self.active_tab is Tab.EDITOR:
            self.highlighter = SyntaxHighlighter()

    def handle_key_press(self, key: str) -> bool:
        """Expire old status messages, then dispatch the key."""
        self._refresh()
        return super().handle_key_press(key)

    def update_size(self, width: int, height: int) -> None:
        """React to a new terminal size."""
        self._refresh()
        old_width = self.buffer.width
        self.buffer.width = width
        self.buffer.height = height

        if width > 20 and self.renderer is not None and abs(width - old_width) > 10:
            word_wrap = min(max(width - WORD_WRAP_MARGIN, MIN_WORD_WRAP), MAX_WORD_WRAP)
            try:
                self.renderer = PreviewRenderer(
                    word_wrap,
                    code_theme=self.renderer.code_theme,
                    color=self.renderer.color,
                )
            except ValueError:
                self.set_status_msg("Warning: Failed to update renderer")

        self.buffer.ensure_cursor_bounds()
        self.buffer.adjust_viewport(clamp_bottom=True)

        if self.active_tab is Tab.PREVIEW and self.preview_offset > 0:
            content_height = height - 3
            if self.preview_offset > content_height:
                self.preview_offset = max(0, self.preview_offset - content_height)

    def tick_blink(self) -> bool:
        """Toggle the cursor blink state and return whether the cursor now shows."""
        self.cursor_blink = not self.cursor_blink
        return self.cursor_blink

    def set_status_msg(self, msg: str, is_error: bool = False) -> None:
        """Show ``msg`` in the status bar for a short time."""
        self._set_status(msg, is_error)

    def view(self) -> str:
        """Return the whole screen as text."""
        if self.width == 0 or self.height == 0:
            return "Loading..."
        if self.height < 6:
            return "Terminal too small".center(self.width)
        content_height = max(1, self.height - 3)
        if self.active_tab is Tab.EDITOR:
            content = self.render_editor(content_height)
        else:
            content = self.render_preview(content_height)
        return "\n".join(
            (self.render_tab_bar(), content, self.render_status_bar(), self.render_footer())
        )

    def render_editor(self, height: int) -> str:
        """Return ``height`` rows of the text, with the cursor drawn when visible."""
        buf = self.buffer
        offset_row = buf.viewport.offset_row
        offset_col = buf.viewport.offset_col
        rows: list[str] = []
        for line_num in range(offset_row, offset_row + height):
            if line_num >= len(buf.content):
                rows.append("~")
                continue
            visible = buf.content[line_num][offset_col:]
            display = visible
            if line_num == buf.cursor.row and self.cursor_blink:
                position = buf.cursor.col - offset_col
                if 0 <= position <= len(visible):
                    display = visible[:position] + CURSOR_GLYPH + visible[position:]
            rows.append(display)
        return "\n".join(rows)

    def render_preview(self, height: int) -> str:
        """Return ``height`` rows of the rendered markdown at the scroll offset."""
        if self.active_tab is not Tab.PREVIEW:
            return "Preview not rendered (not active tab)"
        if self.renderer is None or not self.buffer.content:
            return "Preview not available"
        markdown = self.buffer.text()
        if not markdown.strip():
            return "No content to preview"
        try:
            rendered = self.renderer.render(markdown)
        except Exception as exc:  # a renderer failure is shown instead of the preview
            rendered = f"Error rendering markdown: {exc}"

        lines = rendered.split("\n")
        offset = min(max(self.preview_offset, 0), max(0, len(lines) - height))
        if offset >= len(lines):
            return "End of preview"
        visible = lines[offset : offset + height]
        visible.extend([""] * (height - len(visible)))
        return "\n".join(visible)

    def render_status_bar(self) -> str:
        """Return the status bar: a message, or mode, file and position."""
        if self.status_msg and time.monotonic() < self.status_expiry:
            style = (
                replace(_ERROR, bg="#1E1E1E", padding=1)
                if self.last_error is not None
                else _STATUS_BAR
            )
            return style.render(self.status_msg, width=self.width)

        if self.mode is Mode.INSERT:
            mode = _INSERT_MODE.render("INSERT")
        else:
            mode = _NORMAL_MODE.render("NORMAL")

        file_status = self.filename or "[New File]"
        if not self.buffer.saved:
            file_status += " [modified]"

        cursor = self.buffer.cursor
        position = f"({cursor.row + 1},{cursor.col + 1})"
        error_indicator = _ERROR.render(" ⚠️") if self.last_error is not None else ""

        left = mode + _STATUS_BAR.render(f" {file_status} ")
        right = _STATUS_BAR.render(position) + error_indicator
        used = _visible_width(left) + _visible_width(right) + 2 * _STATUS_BAR.padding
        spacer = " " * max(0, self.width - used)
        return _STATUS_BAR.render(left + spacer + right, width=self.width)

    def render_tab_bar(self) -> str:
        """Return the tab bar with the active tab highlighted."""
        if self.active_tab is Tab.EDITOR:
            tabs = _ACTIVE_TAB.render("Editor") + _INACTIVE_TAB.render("Preview")
        else:
            tabs = _INACTIVE_TAB.render("Editor") + _ACTIVE_TAB.render("Preview")
        instructions = _SEPARATOR.render("Tab/Shift+Tab to switch")
        gap = max(0, self.width - _visible_width(tabs) - _visible_width(instructions))
        return _TAB_BAR.render(tabs + " " * gap + instructions, width=self.width)

    def render_footer(self) -> str:
        """Return the key hints for the current tab and mode."""
        if self.active_tab is Tab.EDITOR:
            if self.mode is Mode.NORMAL:
                hints = (
                    ("i", "Insert"),
                    ("Tab", "Preview"),
                    ("Ctrl+S", "Save"),
                    ("o", "New Line"),
                    ("dd", "Delete Line"),
                    ("Ctrl+Q", "Quit"),
                )
            else:
                hints = (
                    ("Esc", "Normal"),
                    ("Tab", "Preview"),
                    ("Ctrl+S", "Save"),
                    ("Enter", "New Line"),
                    ("Ctrl+V", "Paste"),
                    ("Ctrl+Q", "Quit"),
                )
        else:
            hints = (
                ("Tab", "Editor"),
                ("j/k", "Scroll"),
                ("g/G", "Top/Bottom"),
                ("Ctrl+S", "Save"),
                ("Ctrl+Q", "Quit"),
            )
        separator = _SEPARATOR.render(" │ ")
        text = separator.join(f"{_KEY.render(key)} {label}" for key, label in hints)
        return _FOOTER.render(text, width=self.width, max_width=self.width)

    def rebuild_code_blocks(self) -> list[CodeBlock]:
        """Find fenced code blocks if the content changed; return them."""
        if not self.code_blocks_dirty:
            return self.code_blocks
        blocks: list[CodeBlock] = []
        start: int | None = None
        lang = ""
        for index, line in enumerate(self.buffer.content):
            if not line.startswith("```"):
                continue
            if start is None:
                start = index
                lang = line[3:].strip()
            else:
                blocks.append(CodeBlock(start, index, lang))
                start = None
        if start is not None:
            blocks.append(CodeBlock(start, len(self.buffer.content) - 1, lang))
        self.code_blocks = blocks
        self.code_blocks_dirty = False
        return blocks

    def is_in_code_block(self, line_num: int) -> str | None:
        """Return the language of the block holding ``line_num``, or None.

        Fence lines themselves are not inside the block.
        """
        for block in self.code_blocks:
            if block.start < line_num < block.end:
                return block.lang
        return None