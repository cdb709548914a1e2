"""Terminal syntax highlighting for markdown lines and code blocks."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

_RESET = "\x1b[0m"


def _color_code(color: int, base: int) -> str:
    if color < 8:
        return str(base + color)
    if color < 16:
        return str(base + 60 + color - 8)
    return f"{base + 8};5;{color}"


def styled(
    text: str,
    *,
    fg: int | None = None,
    bg: int | None = None,
    bold: bool = False,
    italic: bool = False,
) -> str:
    """Wrap each line of ``text`` in ANSI attributes for the given colours."""
    codes: list[str] = []
    if bold:
        codes.append("1")
    if italic:
        codes.append("3")
    if fg is not None:
        codes.append(_color_code(fg, 30))
    if bg is not None:
        codes.append(_color_code(bg, 40))
    if not codes or not text:
        return text
    start = f"\x1b[{';'.join(codes)}m"
    return "\n".join(
        f"{start}{line}{_RESET}" if line else line for line in text.split("\n")
    )


def _first_style(names: tuple[str, ...]):
    for name in names:
        try:
            return get_style_by_name(name)
        except ClassNotFound:
            continue
    return get_style_by_name("default")


def _lexer_for(code: str, lang: str) -> Lexer:
    options = {"stripnl": False, "ensurenl": False}
    try:
        return get_lexer_by_name(lang, **options)
    except ClassNotFound:
        pass
    try:
        return guess_lexer(code, **options)
    except ClassNotFound:
        return TextLexer(**options)


class SyntaxHighlighter:
    """Colours markdown source and fenced code for a 256-colour terminal."""

    def __init__(self) -> None:
        self.style = _first_style(("monokai", "github-dark"))
        self.formatter = Terminal256Formatter(style=self.style)

    def highlight_code_block(self, code: str, lang: str) -> str:
        """Highlight ``code`` as ``lang``, guessing the language if unknown."""
        if not code:
            return code
        lexer = _lexer_for(code, lang)
        try:
            return highlight(code, lexer, self.formatter)
        except Exception:  # any lexer or formatter failure falls back to plain green
            return styled(code, fg=2)

    def highlight_markdown_line(self, line: str) -> str:
        """Apply light styling to one line of markdown source."""
        trimmed = line.strip()

        for prefix, color in (("#### ", 2), ("### ", 3), ("## ", 6), ("# ", 4)):
            if line.startswith(prefix):
                return styled(line, fg=color, bold=True)

        if trimmed.startswith("```"):
            return styled(line, fg=8)

        if trimmed.startswith("> "):
            return styled(line, fg=7, italic=True)

        if trimmed.startswith(("- ", "* ", "+ ")):
            indent = " " * (len(line) - len(trimmed))
            return indent + styled("• ", fg=5) + trimmed[2:]

        if len(trimmed) > 2 and trimmed[1] == "." and "0" <= trimmed[0] <= "9":
            return styled(line, fg=5)

        if trimmed in ("---", "***") or trimmed.startswith("---"):
            return styled(line, fg=8)

        if line.count("`") >= 2:
            return self._highlight_inline_code(line)

        return line

    def _highlight_inline_code(self, line: str) -> str:
        parts: list[str] = []
        in_code = False
        code_start = 0
        for index, char in enumerate(line):
            if char == "`":
                if in_code:
                    parts.append(styled(line[code_start:index], fg=2, bg=0))
                    parts.append("`")
                    in_code = False
                else:
                    parts.append("`")
                    code_start = index + 1
                    in_code = True
            elif not in_code:
                parts.append(char)
        if in_code:
            parts.append(line[code_start:])
        return "".join(parts)