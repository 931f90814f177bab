"""
Rich console factory for the dashboard shell.

Two palettes (dark, light) share the same style names; slot panels use
`pending`, `success` and `error` for execution state.
"""

import os
import sys
from typing import Optional

from rich.console import Console
from rich.theme import Theme

PALETTES = {
    "dark": {
        "primary": "white",
        "accent": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "green",
        "pending": "bright_blue",
        "muted": "grey70",
    },
    "light": {
        "primary": "black",
        "accent": "dark_green",
        "warning": "dark_orange",
        "error": "red",
        "success": "green",
        "pending": "blue",
        "muted": "grey42",
    },
}


def _forced() -> bool:
    return (os.getenv("RPCDECK_FORCE_COLOR") or "").lower() in ("1", "true", "yes", "on")


def color_enabled(requested: Optional[bool]) -> bool:
    """
    Decide whether to emit color.

    An explicit False always wins; RPCDECK_FORCE_COLOR beats NO_COLOR;
    None means "only on a terminal".
    """
    if requested is False:
        return False
    if _forced():
        return True
    if os.getenv("NO_COLOR") is not None:
        return False
    if requested is None:
        return sys.stdout.isatty()
    return True


def make_console(theme_name: str, use_color: Optional[bool] = True) -> Console:
    color = color_enabled(use_color)
    return Console(
        theme=Theme(PALETTES.get(theme_name, PALETTES["dark"])),
        no_color=not color,
        color_system="auto" if color else None,
        force_terminal=True if color and _forced() else None,
        highlight=False,
    )


__all__ = ["PALETTES", "color_enabled", "make_console"]
