# hani

A small terminal markdown editor with vim-like keys and a preview tab
that renders the document as formatted markdown.

It needs a POSIX terminal: input is read in raw mode through `termios`.

## Installing

    pip install .

## Running

    hani                 # start with an empty document
    hani notes.md        # open notes.md, or start a new file of that name
    hani --version       # show version information
    hani --version-short # print just the version number
    hani --help          # show usage and key bindings

Any other argument starting with `-` is reported as an unknown flag and
the help is printed.

Files larger than 10 MB, and files that look binary, are not loaded; the
status bar says why.

A second, leaner front end drawing straight to the terminal with plain
escape sequences is also available:

    hani-diy notes.md

## Keys

The editor has two tabs, **Editor** and **Preview**; `Tab` switches
between them.

| Key           | Action                              |
|---------------|-------------------------------------|
| `Ctrl+S`      | Save (any previous file is copied to `<name>.bak` first) |
| `Ctrl+Q`      | Quit (`Ctrl+C` also quits in `hani`) |
| `i`, `a`, `A` | Enter insert mode (at, after the cursor, at line end) |
| `Esc`         | Back to normal mode                 |
| `h j k l`, arrows | Move left, down, up, right      |
| `w b e`       | Next word, previous word, end of word |
| `0 $`         | Start / end of line                 |
| `gg G`        | Start / end of file                 |
| `o O`         | Open a new line below / above       |
| `x dd`        | Delete a character / a line         |

In insert mode, `Enter` splits the line, `Backspace` and `Delete` remove
characters (joining lines at the edges) and `Ctrl+V` pastes from the
system clipboard (`Ctrl+P` also pastes in `hani`).

In `hani-diy` a single `g` goes to the top and a single `d` deletes the
line.

In the preview tab, `j`/`k` scroll, `g` jumps to the top and `G` to the
bottom.

Pasting reads the clipboard through `xclip`, `wl-paste` or `pbpaste`,
whichever succeeds first (`hani-diy` tries `wl-paste` first), giving up
after two seconds.

A document saved without a name is written to `untitled.md`.

## Configuration

`hani` reads settings from `~/.config/hani/config.json`; a missing,
empty or invalid file falls back to defaults:

```json
{
  "tab_size": 4,
  "word_wrap": 80,
  "show_line_numbers": false,
  "theme": "auto",
  "dark_mode": true,
  "auto_save": false,
  "cursor_blink_rate_ms": 500
}
```

Only `word_wrap` changes the editor's behaviour: it sets the width of
the preview until the terminal is resized, and outside 41–239 the
preview is turned off. The other settings are read and saved but not
acted on. From Python, `hani.config.load_config` and
`hani.config.save_config` read and write the same file.

## Using the pieces

The text buffer can be driven without a terminal:

```python
from hani.buffer import Buffer

buf = Buffer.from_text("hello world")
buf.go_bottom()
buf.insert_text("!")
print(buf.text())   # hello world!
```

`hani.preview.PreviewRenderer` renders markdown to terminal text at a
fixed width, and `hani.highlight.SyntaxHighlighter` colours markdown
lines and code blocks for a 256-colour terminal.

## What it does not do

There is no undo, search, line numbering, auto-save or mouse support,
and the editor tab shows plain text without syntax colouring.