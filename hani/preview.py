"""Rendering markdown for the preview tab."""

from __future__ import annotations

import io
from collections.abc import Iterable

from rich.console import Console
from rich.markdown import Markdown


def max_preview_offset(line_count: int, height: int) -> int:
    """Return the furthest the preview can scroll for ``line_count`` rendered lines."""
    return max(0, line_count - height)


class PreviewRenderer:
    """Turns markdown source into terminal text wrapped at a fixed width."""

    def __init__(
        self, word_wrap: int = 80, *, code_theme: str = "monokai", color: bool = True
    ) -> None:
        if word_wrap < 1:
            raise ValueError(f"word wrap must be positive, got {word_wrap}")
        self.word_wrap = word_wrap
        self.code_theme = code_theme
        self.color = color

    def render(self, markdown: str) -> str:
        """Render ``markdown`` to text, with ANSI styling when colour is on."""
        output = io.StringIO()
        console = Console(
            file=output,
            width=self.word_wrap,
            force_terminal=self.color,
            color_system="256" if self.color else None,
            highlight=False,
            legacy_windows=False,
        )
        console.print(Markdown(markdown, code_theme=self.code_theme))
        return output.getvalue()

    def render_lines(self, content: Iterable[str]) -> list[str]:
        """Render the given source lines and split the result into display lines.

        Content that is blank renders to no lines at all.
        """
        markdown = "\n".join(content)
        if not markdown.strip():
            return []
        return self.render(markdown).split("\n")