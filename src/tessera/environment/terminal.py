"""Terminal color helpers for component error diagnostics.

ANSI colouring with TTY detection, honouring ``NO_COLOR`` and ``FORCE_COLOR``.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_blue": "\033[94m",
}

ColorName = Literal[
    "reset", "bold", "dim", "red", "green", "yellow", "cyan",
    "bright_red", "bright_green", "bright_blue",
]

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    """Decide once whether diagnostics get ANSI colours.

    ``FORCE_COLOR`` wins over ``NO_COLOR`` (https://no-color.org/); otherwise
    colours are used only when stdout is a TTY.
    """
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    return _USE_COLORS


def colorize(text: str, *colors: ColorName) -> str:
    """Wrap ``text`` in the given ANSI codes, or return it untouched.

    Example:
        >>> colorize("T-RUN-001", "bright_red", "bold")
        '\\033[91m\\033[1mT-RUN-001\\033[0m'  # when colours are enabled
    """
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS.get(color, "") for color in colors)
    if not prefix:
        return text
    return f"{prefix}{text}{_COLORS['reset']}"


def strip_colors(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


def error_code(text: str) -> str:
    return colorize(text, "bright_red", "bold")


def component(text: str) -> str:
    """Colour a component URI (cyan)."""
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "green")


def suggestion(text: str) -> str:
    """Colour a 'Did you mean?' candidate."""
    return colorize(text, "bright_green", "bold")


def format_error_header(code: str | None, message: str) -> str:
    """Prefix ``message`` with a coloured error code when one is given."""
    if code:
        return f"{error_code(code)}: {message}"
    return message


def format_import_chain(chain: list[str] | tuple[str, ...]) -> str:
    """Render an import chain as ``a → b → c`` with the repeated URI highlighted.

    The last entry is shown in red when it already appears earlier in the
    chain, which is what a cyclic import looks like.
    """
    if not chain:
        return ""
    *head, last = chain
    parts = [component(uri) for uri in head]
    if last in head:
        parts.append(colorize(last, "bright_red", "bold"))
    else:
        parts.append(component(last))
    return " → ".join(parts)
