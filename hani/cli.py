"""Command-line entry point for the full-screen editor."""

from __future__ import annotations

import signal
import sys
from collections.abc import Iterable
from typing import Protocol

from hani.buffer import Mode, Tab
from hani.model import Model
from hani.terminal import CLEAR_SCREEN, HIDE_CURSOR, SHOW_CURSOR, RawTerminal, terminal_size
from hani.version import help_text, print_help, print_version, print_version_short

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"

_NAMED_BYTES = {
    "\x03": "ctrl+c",
    "\x11": "ctrl+q",
    "\x13": "ctrl+s",
    "\x16": "ctrl+v",
    "\x10": "ctrl+p",
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b": "esc",
}

# Normal-mode commands typed as the same key twice.
_CHORD_KEYS = frozenset({"g", "d"})


class _Terminal(Protocol):
    def read_keys(self) -> Iterable[str]: ...

    def write(self, text: str) -> object: ...


def _key_name(key: str) -> str:
    """Name a decoded key the way the key bindings expect."""
    if key in _NAMED_BYTES:
        return _NAMED_BYTES[key]
    if len(key) == 1 and ord(key) < 32:
        return f"ctrl+{chr(ord(key) + 96)}"
    return key


def _frame(model: Model) -> str:
    return HIDE_CURSOR + CLEAR_SCREEN + model.view().replace("\n", "\r\n")


def _in_normal_editor(model: Model) -> bool:
    return model.active_tab is Tab.EDITOR and model.mode is Mode.NORMAL


def run_model(model: Model, terminal: _Terminal) -> None:
    """Show ``model`` on the alternate screen and feed it keys until it quits.

    Returns when a key asks to quit or when the terminal has no more keys.
    """
    terminal.write(ENTER_ALT_SCREEN + _frame(model))
    pending: str | None = None
    try:
        for raw in terminal.read_keys():
            name = _key_name(raw)
            if _in_normal_editor(model) and name in _CHORD_KEYS:
                if pending == name:
                    pending = None
                    if model.handle_key_press(name * 2):
                        return
                else:
                    if pending is not None and model.handle_key_press(pending):
                        return
                    pending = name
                terminal.write(_frame(model))
                continue
            if pending is not None:
                first, pending = pending, None
                if model.handle_key_press(first):
                    return
            if model.handle_key_press(name):
                return
            terminal.write(_frame(model))
    finally:
        terminal.write(SHOW_CURSOR + LEAVE_ALT_SCREEN)


def start_editor(filename: str = "") -> int:
    """Run the editor on ``filename`` in the current terminal; return an exit code."""
    try:
        width, height = terminal_size()
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1

    model = Model(filename)
    model.update_size(width, height)
    has_winch = hasattr(signal, "SIGWINCH")
    previous = None
    try:
        with RawTerminal() as terminal:
            if has_winch:

                def _on_resize(signum: int, frame: object) -> None:
                    try:
                        model.update_size(*terminal_size())
                    except OSError:
                        return
                    terminal.write(_frame(model))

                previous = signal.signal(signal.SIGWINCH, _on_resize)
            run_model(model, terminal)
    except (OSError, EOFError) as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        if has_winch and previous is not None:
            signal.signal(signal.SIGWINCH, previous)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Handle the command-line flags, or start the editor on a file."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        return start_editor("")

    arg = args[0]
    if arg in ("-v", "--version"):
        print_version()
        return 0
    if arg in ("-h", "--help"):
        print_help()
        return 0
    if arg == "--version-short":
        print_version_short()
        return 0
    if not arg.startswith("-"):
        return start_editor(arg)

    print(f"Unknown flag: {arg}\n", file=sys.stderr)
    print(help_text(), end="")
    return 1