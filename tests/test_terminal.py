import os
import termios
from unittest import mock

import pytest

from hani import terminal
from hani.terminal import (
    CLEAR_SCREEN,
    DELETE,
    DOWN,
    ESC,
    LEFT,
    RIGHT,
    SHOW_CURSOR,
    UP,
    RawTerminal,
    decode_keys,
    move_to,
    terminal_size,
)


@pytest.fixture
def pty_pair():
    master, slave = os.openpty()
    yield master, slave
    os.close(master)
    os.close(slave)


def test_move_to_format():
    assert move_to(3, 7) == "\x1b[3;7H"


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"\x1b[A", [UP]),
        (b"\x1b[B", [DOWN]),
        (b"\x1b[C", [RIGHT]),
        (b"\x1b[D", [LEFT]),
        (b"\x1b[3~", [DELETE]),
        (b"\x1b[3", [DELETE]),
        (b"\x1b", [ESC]),
        (b"\x1b[", [ESC]),
        (b"\x1b[Z", [ESC]),
        (b"\x1bx", [ESC]),
    ],
)
def test_decode_escape_sequences(data, expected):
    assert decode_keys(data) == expected


def test_decode_plain_bytes_are_characters():
    assert decode_keys(b"ab\x11") == ["a", "b", "\x11"]


def test_decode_mixed_stream():
    assert decode_keys(b"a\x1b[Bb\x1b[3~c") == ["a", DOWN, "b", DELETE, "c"]


def test_decode_empty():
    assert decode_keys(b"") == []


def test_terminal_size_reads_stdin():
    fake_stdin = mock.Mock()
    fake_stdin.fileno.return_value = 0
    with mock.patch("sys.stdin", fake_stdin), mock.patch(
        "os.get_terminal_size", return_value=os.terminal_size((100, 40))
    ):
        assert terminal_size() == (100, 40)


def test_terminal_size_error_propagates():
    fake_stdin = mock.Mock()
    fake_stdin.fileno.return_value = 0
    with mock.patch("sys.stdin", fake_stdin), mock.patch(
        "os.get_terminal_size", side_effect=OSError("not a tty")
    ):
        with pytest.raises(OSError):
            terminal.terminal_size()


def test_raw_mode_is_set_and_restored(pty_pair):
    master, slave = pty_pair
    before = termios.tcgetattr(slave)
    with RawTerminal(slave, slave):
        inside = termios.tcgetattr(slave)
        assert inside[3] & termios.ICANON == 0
        assert inside[3] & termios.ECHO == 0
    assert termios.tcgetattr(slave) == before


def test_exit_restores_cursor_and_clears(pty_pair):
    master, slave = pty_pair
    raw = RawTerminal(slave, slave)
    raw.__enter__()
    suppressed = raw.__exit__(None, None, None)
    assert not suppressed
    output = os.read(master, 1024).decode()
    assert output == SHOW_CURSOR + CLEAR_SCREEN


def test_write_sends_text(pty_pair):
    master, slave = pty_pair
    raw = RawTerminal(slave, slave)
    with raw as term:
        assert term is raw
        term.write("hi")
        assert os.read(master, 1024) == b"hi"
    os.read(master, 1024)


def test_read_keys_decodes_input(pty_pair):
    master, slave = pty_pair
    with RawTerminal(slave, slave) as term:
        keys = term.read_keys()
        os.write(master, b"\x1b[A")
        assert next(keys) == UP
        os.write(master, b"\x1b[3")
        os.write(master, b"~")
        assert next(keys) == DELETE
        os.write(master, b"q")
        assert next(keys) == "q"
    os.read(master, 1024)


def test_read_keys_raises_at_end_of_input():
    read_end, write_end = os.pipe()
    os.write(write_end, b"a")
    os.close(write_end)
    term = RawTerminal(read_end, read_end)
    keys = term.read_keys()
    try:
        assert next(keys) == "a"
        with pytest.raises(EOFError):
            next(keys)
    finally:
        os.close(read_end)


def test_enter_on_non_terminal_raises_oserror():
    read_end, write_end = os.pipe()
    try:
        with pytest.raises(OSError, match="raw mode"):
            RawTerminal(read_end, write_end).__enter__()
    finally:
        os.close(read_end)
        os.close(write_end)