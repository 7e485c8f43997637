"""ANSI emphasis for terminal output, disabled when stdout is not a TTY."""

from __future__ import annotations

import os
import sys
from typing import Optional

_CODES = {
    "red": "31",
    "green": "32",
    "yellow": "33",
    "blue": "34",
    "magenta": "35",
    "cyan": "36",
    "white": "37",
    "gray": "90",
}


def colors_enabled() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def color(text: str, fg: Optional[str] = None, *, bold: bool = False, dim: bool = False) -> str:
    """Wrap ``text`` in ANSI codes for the requested foreground and weight."""

    if not colors_enabled():
        return text
    codes = []
    if bold:
        codes.append("1")
    if dim:
        codes.append("2")
    if fg and fg in _CODES:
        codes.append(_CODES[fg])
    if not codes:
        return text
    return f"\033[{';'.join(codes)}m{text}\033[0m"


__all__ = ["color", "colors_enabled"]
