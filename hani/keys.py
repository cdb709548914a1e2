"""Key handling for the editor and preview tabs."""

from __future__ import annotations

import time
from collections.abc import Callable

from hani.buffer import Buffer, Mode, Tab, save_lines
from hani.clipboard import get_clipboard
from hani.preview import PreviewRenderer, max_preview_offset

STATUS_MSG_DURATION = 2.0
ERROR_MSG_DURATION = 3.0
UNTITLED = "untitled.md"

_PASTE_KEYS = frozenset({"ctrl+v", "ctrl+p", "shift+insert"})


class KeyBindings:
    """Editor state driven by named key presses such as ``"j"`` or ``"ctrl+s"``.

    Handlers return True when the key asks the program to quit.
    """

    def __init__(
        self,
        buffer: Buffer | None = None,
        *,
        filename: str = "",
        renderer: PreviewRenderer | None = None,
        clipboard: Callable[[], str] | None = None,
    ) -> None:
        self.buffer = buffer if buffer is not None else Buffer()
        self.filename = filename
        self.renderer = renderer
        self.clipboard = clipboard if clipboard is not None else get_clipboard
        self.mode = Mode.NORMAL
        self.active_tab = Tab.EDITOR
        self.preview_offset = 0
        self.status_msg = ""
        self.status_expiry = 0.0
        self.code_blocks_dirty = True

    def _set_status(self, msg: str, is_error: bool = False) -> None:
        duration = ERROR_MSG_DURATION if is_error else STATUS_MSG_DURATION
        self.status_msg = msg
        self.status_expiry = time.monotonic() + duration

    def _follow(self) -> None:
        self.buffer.adjust_viewport(clamp_bottom=True)

    def _rendered_lines(self) -> list[str]:
        if self.renderer is None:
            return []
        return self.renderer.render_lines(self.buffer.content)

    def handle_key_press(self, key: str) -> bool:
        """Dispatch a key to the global bindings, then to the active tab."""
        if key in ("ctrl+c", "ctrl+q"):
            return True
        if key == "ctrl+s":
            self.save_file()
            return False
        if key in ("tab", "shift+tab"):
            self.active_tab = Tab.PREVIEW if self.active_tab is Tab.EDITOR else Tab.EDITOR
            return False
        if self.active_tab is Tab.EDITOR:
            if self.mode is Mode.NORMAL:
                return self.handle_normal_mode(key)
            return self.handle_insert_mode(key)
        return self.handle_preview_mode(key)

    def handle_normal_mode(self, key: str) -> bool:
        """Apply a vim-style normal-mode command."""
        buf = self.buffer
        buf.ensure_cursor_bounds()
        match key:
            case "h" | "left":
                buf.move_left()
                self._follow()
            case "j" | "down":
                buf.move_down()
                self._follow()
            case "k" | "up":
                buf.move_up()
                self._follow()
            case "l" | "right":
                buf.move_right()
                self._follow()
            case "0":
                buf.line_start()
                self._follow()
            case "$":
                buf.line_end()
                self._follow()
            case "gg":
                buf.go_top()
                self._follow()
            case "G":
                buf.go_bottom()
                self._follow()
            case "i":
                self.mode = Mode.INSERT
            case "a":
                self.mode = Mode.INSERT
                buf.move_right()
            case "A":
                self.mode = Mode.INSERT
                buf.line_end()
            case "o":
                self.mode = Mode.INSERT
                buf.open_below()
                self.code_blocks_dirty = True
                self._follow()
            case "O":
                self.mode = Mode.INSERT
                buf.open_above()
                self.code_blocks_dirty = True
                self._follow()
            case "x":
                buf.delete_char()
                self.code_blocks_dirty = True
            case "dd":
                buf.delete_line()
                self.code_blocks_dirty = True
                self._follow()
            case "w":
                buf.cursor = buf.next_word()
                self._follow()
            case "b":
                buf.cursor = buf.prev_word()
                self._follow()
            case "e":
                buf.cursor = buf.end_of_word()
                self._follow()
        return False

    def handle_insert_mode(self, key: str) -> bool:
        """Insert text or apply an insert-mode editing key."""
        buf = self.buffer
        match key:
            case "esc":
                self.mode = Mode.NORMAL
                buf.move_left()
            case "left":
                buf.move_left()
                self._follow()
            case "right":
                buf.move_right()
                self._follow()
            case "up":
                buf.move_up()
                self._follow()
            case "down":
                buf.move_down()
                self._follow()
            case "enter":
                buf.split_line()
                self.code_blocks_dirty = True
                self._follow()
            case "backspace":
                buf.backspace()
                self.code_blocks_dirty = True
                self._follow()
            case "delete":
                buf.delete_char()
                self.code_blocks_dirty = True
            case _ if key in _PASTE_KEYS:
                self.paste(self.clipboard())
            case _ if len(key) == 1:
                buf.insert_char(key)
                self.code_blocks_dirty = True
        return False

    def handle_preview_mode(self, key: str) -> bool:
        """Scroll the rendered preview."""
        if self.active_tab is not Tab.PREVIEW:
            return False
        height = self.buffer.height - 3
        match key:
            case "j" | "down":
                lines = self._rendered_lines()
                if lines and self.preview_offset < max_preview_offset(len(lines), height):
                    self.preview_offset += 1
            case "k" | "up":
                if self.preview_offset > 0:
                    self.preview_offset -= 1
            case "g":
                self.preview_offset = 0
            case "G":
                lines = self._rendered_lines()
                if lines:
                    self.preview_offset = max_preview_offset(len(lines), height)
        return False

    def paste(self, text: str) -> int:
        """Insert ``text`` at the cursor and return how many lines it spans."""
        if not text:
            return 0
        if "```" in text:
            self._set_status("Pasting code block (chunked approach)")
        return self.buffer.insert_text(text)

    def save_file(self) -> bool:
        """Write the buffer to its file, naming it ``untitled.md`` if unnamed."""
        if not self.filename:
            self.filename = UNTITLED
        try:
            save_lines(self.filename, self.buffer.content)
        except OSError as exc:
            self._set_status(f"Error saving file: {exc}", True)
            return False
        self.buffer.saved = True
        self.code_blocks_dirty = True
        self._set_status(f"File saved: {self.filename}")
        return True