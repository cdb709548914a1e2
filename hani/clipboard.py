"""Reading the system clipboard through the usual command-line tools."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Iterable, Sequence

XCLIP = ("xclip", "-o", "-selection", "clipboard")
WL_PASTE = ("wl-paste",)
PBPASTE = ("pbpaste",)

XCLIP_FIRST: tuple[tuple[str, ...], ...] = (XCLIP, WL_PASTE, PBPASTE)
WAYLAND_FIRST: tuple[tuple[str, ...], ...] = (WL_PASTE, XCLIP, PBPASTE)


def get_clipboard(
    order: Iterable[Sequence[str]] | None = None, timeout: float = 2.0
) -> str:
    """Return clipboard text from the first tool that succeeds, or "".

    All tools share one deadline of ``timeout`` seconds; trailing newlines
    are removed from the result.
    """
    commands = XCLIP_FIRST if order is None else order
    deadline = time.monotonic() + timeout
    for command in commands:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return ""
        try:
            result = subprocess.run(
                list(command),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=remaining,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return ""
        except OSError:
            continue
        if result.returncode != 0:
            continue
        return result.stdout.decode("utf-8", errors="replace").rstrip("\n")
    return ""