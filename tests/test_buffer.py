import pytest

from hani.buffer import (
    Buffer,
    Position,
    Viewport,
    is_whitespace,
    save_lines,
)


def make(lines, row=0, col=0, **kwargs):
    buf = Buffer(content=list(lines), **kwargs)
    buf.cursor = Position(row, col)
    return buf


def test_from_text_round_trip():
    buf = Buffer.from_text("alpha\nbeta\n")
    assert buf.content == ["alpha", "beta"]
    assert buf.text() == "alpha\nbeta"


def test_from_text_empty_gives_one_line():
    buf = Buffer.from_text("")
    assert buf.content == [""]
    assert buf.text() == ""


def test_empty_content_replaced():
    assert Buffer(content=[]).content == [""]


def test_content_height_never_below_one():
    assert make(["x"], height=2).content_height() == 1
    assert make(["x"], height=10).content_height() == 10 - 3


def test_insert_char_and_saved_flag():
    buf = make(["ac"], col=1)
    buf.insert_char("b")
    assert buf.text() == "abc"
    assert buf.cursor == Position(0, 2)
    assert buf.saved is False


def test_insert_char_rejects_strings():
    with pytest.raises(ValueError):
        make(["x"]).insert_char("ab")


def test_split_then_backspace_restores():
    buf = make(["hello world"], col=5)
    buf.split_line()
    assert buf.content == ["hello", " world"]
    assert buf.cursor == Position(1, 0)
    buf.backspace()
    assert buf.content == ["hello world"]
    assert buf.cursor == Position(0, len("hello"))


def test_backspace_at_origin_does_nothing():
    buf = make(["abc"])
    buf.backspace()
    assert buf.content == ["abc"]
    assert buf.saved is True


def test_delete_char_middle_and_join():
    buf = make(["abc", "def"], col=1)
    buf.delete_char()
    assert buf.content == ["ac", "def"]
    buf.line_end()
    buf.delete_char()
    assert buf.content == ["acdef"]


def test_delete_char_on_last_line_end_keeps_text():
    buf = make(["abc"], col=3)
    buf.delete_char()
    assert buf.content == ["abc"]
    assert buf.saved is True


def test_delete_line_clamps_cursor():
    buf = make(["first", "second", "x"], row=2, col=1)
    buf.delete_line()
    assert buf.content == ["first", "second"]
    assert buf.cursor.row == 1
    buf.cursor.col = 6
    buf.delete_line()
    assert buf.content == ["first"]
    assert buf.cursor == Position(0, len("first"))


def test_delete_only_line_empties_it():
    buf = make(["only"], col=2)
    buf.delete_line()
    assert buf.content == [""]
    assert buf.cursor == Position(0, 0)
    assert buf.saved is False


def test_open_below_and_above():
    buf = make(["a", "b"])
    buf.open_below()
    assert buf.content == ["a", "", "b"]
    assert buf.cursor == Position(1, 0)
    buf.open_above()
    assert buf.content == ["a", "", "", "b"]
    assert buf.cursor.row == 1


def test_vertical_moves_clamp_column():
    buf = make(["long line", "ab"], col=7)
    buf.move_down()
    assert buf.cursor == Position(1, len("ab"))
    buf.move_down()
    assert buf.cursor.row == 1
    buf.move_up()
    assert buf.cursor == Position(0, len("ab"))


def test_horizontal_moves_stop_at_edges():
    buf = make(["ab"])
    buf.move_left()
    assert buf.cursor.col == 0
    for _ in range(5):
        buf.move_right()
    assert buf.cursor.col == len("ab")


def test_top_and_bottom():
    buf = make(["one", "two", "three"], row=1, col=1)
    buf.go_bottom()
    assert buf.cursor == Position(2, len("three"))
    buf.line_start()
    assert buf.cursor.col == 0
    buf.go_top()
    assert buf.cursor == Position(0, 0)


def test_insert_text_single_line():
    buf = make(["ad"], col=1)
    assert buf.insert_text("bc") == 1
    assert buf.text() == "abcd"
    assert buf.cursor.col == 1 + len("bc")


def test_insert_text_multi_line():
    buf = make(["before", "ab", "after"], row=1, col=1)
    count = buf.insert_text("X\nY\nZ")
    assert count == 3
    assert buf.text() == "before\naX\nY\nZb\nafter"
    assert buf.cursor == Position(1 + 2, len("Z"))
    assert buf.saved is False


def test_insert_text_empty_is_noop():
    buf = make(["abc"], col=1)
    assert buf.insert_text("") == 0
    assert buf.text() == "abc"
    assert buf.saved is True


def test_next_word_same_line():
    line = "hello world"
    buf = make([line])
    assert buf.next_word() == Position(0, line.index("world"))


def test_next_word_crosses_lines_skipping_indent():
    second = "   next"
    buf = make(["last", second], col=1)
    assert buf.next_word() == Position(1, second.index("next"))


def test_prev_word_moves_to_word_start():
    line = "one two three"
    buf = make([line], col=line.index("three") + 2)
    assert buf.prev_word() == Position(0, line.index("three"))


def test_prev_word_at_line_start_goes_to_previous_line_end():
    buf = make(["above", "below"], row=1)
    assert buf.prev_word() == Position(0, len("above"))


def test_end_of_word_inside_and_before_word():
    line = "foo  barbaz"
    buf = make([line])
    assert buf.end_of_word() == Position(0, line.index("foo") + len("foo") - 1)
    buf.cursor.col = line.index("foo") + len("foo")
    assert buf.end_of_word() == Position(0, len(line) - 1)


def test_ensure_cursor_bounds_clamps():
    buf = make(["abc", "de"], row=9, col=9)
    buf.ensure_cursor_bounds()
    assert buf.cursor == Position(1, len("de"))
    buf.cursor = Position(-3, -1)
    buf.ensure_cursor_bounds()
    assert buf.cursor == Position(0, 0)


def test_adjust_viewport_keeps_cursor_visible():
    buf = make([str(n) for n in range(50)], height=8)
    height = buf.content_height()
    for row in (0, 20, 49, 3, 30):
        buf.cursor = Position(row, 0)
        buf.adjust_viewport()
        off = buf.viewport.offset_row
        assert off <= row < off + height
        assert off >= 0


def test_adjust_viewport_clamp_bottom():
    lines = [str(n) for n in range(10)]
    buf = make(lines, height=8)
    buf.viewport = Viewport(offset_row=9)
    buf.cursor = Position(9, 0)
    buf.adjust_viewport()
    assert buf.viewport.offset_row == 9
    buf.adjust_viewport(clamp_bottom=True)
    assert buf.viewport.offset_row == len(lines) - buf.content_height()


def test_adjust_viewport_horizontal():
    line = "x" * 100
    buf = make([line], col=90, width=23)
    buf.adjust_viewport()
    visible = buf.width - 3
    off = buf.viewport.offset_col
    assert off <= buf.cursor.col < off + visible
    buf.cursor.col = 0
    buf.adjust_viewport()
    assert buf.viewport.offset_col == 0


@pytest.mark.parametrize("char", [" ", "\t", "\n", "\r"])
def test_is_whitespace_true(char):
    assert is_whitespace(char) is True


@pytest.mark.parametrize("char", ["a", "-", "#", "\v"])
def test_is_whitespace_false(char):
    assert is_whitespace(char) is False


def test_save_lines_writes_and_backs_up(tmp_path):
    target = tmp_path / "doc.md"
    target.write_bytes(b"old contents")
    result = save_lines(target, ["# Title", "", "body"])
    assert result == target
    assert target.read_bytes() == b"# Title\n\nbody"
    assert (tmp_path / "doc.md.bak").read_bytes() == b"old contents"


def test_save_lines_new_file_has_no_backup(tmp_path):
    target = tmp_path / "new.md"
    save_lines(target, ["only"])
    assert target.read_text(encoding="utf-8") == "only"
    assert not (tmp_path / "new.md.bak").exists()


def test_save_lines_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        save_lines(tmp_path / "missing" / "x.md", ["a"])