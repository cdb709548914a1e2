"""Raw terminal input and output with plain escape sequences."""

from __future__ import annotations

import os
import sys
import termios
import tty
from collections.abc import Iterator

CLEAR_SCREEN = "\x1b[2J\x1b[H"
CLEAR_LINE = "\x1b[K"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
REVERSE = "\x1b[7m"
RESET = "\x1b[0m"

# Names given to keys that arrive as escape sequences.
ESC = "esc"
DELETE = "delete"
UP = "up"
DOWN = "down"
RIGHT = "right"
LEFT = "left"

_ESC_BYTE = 0x1B
_ARROWS = {ord("A"): UP, ord("B"): DOWN, ord("C"): RIGHT, ord("D"): LEFT}
_READ_SIZE = 64


def move_to(row: int, col: int) -> str:
    """Return the sequence that puts the cursor at a one-based row and column."""
    return f"\x1b[{row};{col}H"


def terminal_size() -> tuple[int, int]:
    """Return the (columns, rows) of the terminal on standard input.

    Raises OSError when standard input is not a terminal.
    """
    size = os.get_terminal_size(sys.stdin.fileno())
    return size.columns, size.lines


def decode_keys(data: bytes) -> list[str]:
    """Split raw input into keys.

    Arrow keys and Delete become their names, any other escape sequence
    becomes ``ESC``, and every other byte becomes a one-character string.
    """
    keys: list[str] = []
    index = 0
    end = len(data)
    while index < end:
        byte = data[index]
        if byte != _ESC_BYTE:
            keys.append(chr(byte))
            index += 1
            continue
        if index + 2 < end and data[index + 1] == ord("["):
            final = data[index + 2]
            index += 3
            if final == ord("3"):
                if index < end and data[index] == ord("~"):
                    index += 1
                keys.append(DELETE)
            else:
                keys.append(_ARROWS.get(final, ESC))
            continue
        # A lone escape, or an escape with one byte after it that no key uses.
        keys.append(ESC)
        index += 2
    return keys


class RawTerminal:
    """A terminal switched to raw mode for the life of a ``with`` block."""

    def __init__(self, fd_in: int | None = None, fd_out: int | None = None) -> None:
        self.fd_in = sys.stdin.fileno() if fd_in is None else fd_in
        self.fd_out = sys.stdout.fileno() if fd_out is None else fd_out
        self._saved: list | None = None

    def __enter__(self) -> "RawTerminal":
        try:
            self._saved = termios.tcgetattr(self.fd_in)
            tty.setraw(self.fd_in)
        except termios.error as exc:
            raise OSError(f"failed to set raw mode: {exc}") from exc
        return self

    def __exit__(self, *args: object) -> None:
        if self._saved is not None:
            try:
                termios.tcsetattr(self.fd_in, termios.TCSANOW, self._saved)
            except termios.error:
                pass
            self._saved = None
        self.write(SHOW_CURSOR + CLEAR_SCREEN)

    def write(self, text: str) -> None:
        """Write all of ``text`` to the output."""
        data = memoryview(text.encode("utf-8"))
        while data:
            written = os.write(self.fd_out, data)
            data = data[written:]

    def read_keys(self) -> Iterator[str]:
        """Yield keys as they are typed; raise EOFError when input ends."""
        while True:
            data = os.read(self.fd_in, _READ_SIZE)
            if not data:
                raise EOFError("end of input")
            if data.endswith(b"\x1b[3"):
                data += os.read(self.fd_in, 1)
            yield from decode_keys(data)