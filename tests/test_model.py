import re

import pytest

from hani.buffer import Mode, Tab
from hani.config import Config
from hani.model import (
    CURSOR_GLYPH,
    MAX_FILE_SIZE,
    MAX_WORD_WRAP,
    MIN_WORD_WRAP,
    WORD_WRAP_MARGIN,
    CodeBlock,
    Model,
    is_binary_file,
)

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text):
    return _ANSI.sub("", text)


def make(filename="", content=None):
    model = Model(filename, config=Config(), clipboard=lambda: "")
    if content is not None:
        model.buffer.content = list(content)
        model.code_blocks_dirty = True
        model.rebuild_code_blocks()
    return model


def test_is_binary_file_cases():
    assert is_binary_file(b"") is False
    assert is_binary_file(b"hello\nworld\t\r\n") is False
    assert is_binary_file(b"abc\x00def") is True
    assert is_binary_file(b"\x01\x02\x03\x04a") is True


def test_loads_existing_file(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# Title\nbody\n")
    model = make(str(path))
    assert model.buffer.content == ["# Title", "body"]
    assert model.buffer.saved is True
    assert model.status_msg == ""
    assert model.last_error is None


def test_empty_file_gives_one_line(tmp_path):
    path = tmp_path / "empty.md"
    path.write_text("")
    model = make(str(path))
    assert model.buffer.content == [""]


def test_missing_file_is_new(tmp_path):
    path = tmp_path / "new.md"
    model = make(str(path))
    assert model.status_msg == f"New file: {path}"
    assert model.buffer.saved is False


def test_binary_file_rejected(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\x00\x01\x02")
    model = make(str(path))
    assert model.status_msg == f"Cannot edit binary file: {path}"
    assert isinstance(model.last_error, ValueError)
    assert model.buffer.content == [""]


def test_large_file_rejected(tmp_path):
    path = tmp_path / "big.md"
    with path.open("wb") as handle:
        handle.truncate(MAX_FILE_SIZE + 1)
    model = make(str(path))
    assert model.status_msg.startswith("File too large")
    assert model.last_error is not None
    assert model.buffer.content == [""]


def test_no_filename_is_saved():
    model = make()
    assert model.buffer.saved is True
    assert model.filename == ""


def test_view_before_size_and_small_terminal():
    model = make()
    assert model.view() == "Loading..."
    model.update_size(40, 5)
    assert model.view().strip() == "Terminal too small"


def test_view_has_all_rows():
    model = make(content=["one", "two"])
    model.update_size(80, 24)
    rows = model.view().split("\n")
    assert len(rows) == 24
    assert plain(rows[1]) == CURSOR_GLYPH + "one"


def test_code_blocks():
    model = make(content=["text", "```python", "x = 1", "```", "after"])
    assert model.code_blocks == [CodeBlock(1, 3, "python")]
    assert model.is_in_code_block(2) == "python"
    assert model.is_in_code_block(1) is None
    assert model.is_in_code_block(4) is None


def test_unclosed_code_block_runs_to_end():
    model = make(content=["```", "a", "b"])
    assert model.code_blocks == [CodeBlock(0, 2, "")]
    assert model.is_in_code_block(1) == ""


def test_render_editor_tildes_and_cursor():
    model = make(content=["abc"])
    model.update_size(80, 24)
    rows = model.render_editor(4)
    assert rows.split("\n") == [CURSOR_GLYPH + "abc", "~", "~", "~"]


def test_render_editor_cursor_at_end_and_blink_off():
    model = make(content=["abc"])
    model.update_size(80, 24)
    model.buffer.cursor.col = 3
    assert model.render_editor(1) == "abc" + CURSOR_GLYPH
    model.tick_blink()
    assert model.render_editor(1) == "abc"


def test_tick_blink_toggles():
    model = make()
    assert model.tick_blink() is False
    assert model.tick_blink() is True


def test_render_preview_messages():
    model = make(content=["# Hi"])
    assert model.render_preview(5) == "Preview not rendered (not active tab)"
    model.active_tab = Tab.PREVIEW
    model.buffer.content = ["   "]
    assert model.render_preview(5) == "No content to preview"


def test_render_preview_fills_height():
    model = make(content=["# Title", "", "Some text here."])
    model.update_size(80, 24)
    model.active_tab = Tab.PREVIEW
    out = model.render_preview(10).split("\n")
    assert len(out) == 10
    assert "Title" in plain("\n".join(out))


def test_status_bar_shows_file_and_position(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("hello\n")
    model = make(str(path))
    model.update_size(80, 24)
    bar = plain(model.render_status_bar())
    assert "NORMAL" in bar
    assert str(path) in bar
    assert "(1,1)" in bar
    assert "[modified]" not in bar
    model.handle_key_press("i")
    model.handle_key_press("x")
    bar = plain(model.render_status_bar())
    assert "INSERT" in bar
    assert "[modified]" in bar
    assert "(1,2)" in bar


def test_status_bar_new_file_and_message():
    model = make()
    model.update_size(80, 24)
    assert "[New File]" in plain(model.render_status_bar())
    model.set_status_msg("hello there")
    assert plain(model.render_status_bar()).strip() == "hello there"


def test_tab_bar_width_and_active():
    model = make()
    model.update_size(80, 24)
    bar = plain(model.render_tab_bar())
    assert len(bar) == 80
    assert bar.startswith(" Editor  Preview ")
    assert bar.endswith("Tab/Shift+Tab to switch")


def test_footer_fits_width_and_follows_mode():
    model = make()
    model.update_size(40, 24)
    footer = plain(model.render_footer())
    assert len(footer) == 40
    assert "Insert" in footer
    model.update_size(200, 24)
    model.mode = Mode.INSERT
    assert "Paste" in plain(model.render_footer())
    model.active_tab = Tab.PREVIEW
    assert "Top/Bottom" in plain(model.render_footer())


def test_update_size_rewraps_renderer():
    model = make()
    model.update_size(100, 24)
    assert model.renderer.word_wrap == 100 - WORD_WRAP_MARGIN
    model.update_size(300, 24)
    assert model.renderer.word_wrap == MAX_WORD_WRAP
    model.update_size(30, 24)
    assert model.renderer.word_wrap == MIN_WORD_WRAP


def test_update_size_reduces_preview_offset():
    model = make()
    model.active_tab = Tab.PREVIEW
    model.preview_offset = 30
    model.update_size(80, 24)
    assert model.preview_offset == 9


@pytest.mark.parametrize("key", ["tab", "shift+tab"])
def test_tab_switch_through_model(key):
    model = make()
    model.update_size(80, 24)
    assert model.handle_key_press(key) is False
    assert model.active_tab is Tab.PREVIEW
    assert model.handle_key_press("ctrl+q") is True