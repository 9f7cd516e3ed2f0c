"""SGR styling helpers and the tagged cell variant used in list content."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
ITALIC = "\x1b[3m"
UNDERLINE = "\x1b[4m"
INVERSE = "\x1b[7m"

_CODES: dict[str, str] = {
    "bold": BOLD,
    "dim": DIM,
    "italic": ITALIC,
    "underline": UNDERLINE,
    "inverse": INVERSE,
    # Semantic colors
    "accent": "\x1b[36m",
    "highlight": "\x1b[35m",
    "muted": "\x1b[90m",
    "text": "\x1b[37m",
    "success": "\x1b[32m",
    "warning": "\x1b[33m",
    "error": "\x1b[31m",
}


def style(text: str, *names: str) -> str:
    """Wrap *text* in the SGR codes for *names* followed by a reset.

    Unknown names raise ``KeyError``.
    """
    if not names:
        return text
    prefix = "".join(_CODES[name] for name in names)
    return f"{prefix}{text}{RESET}"


@dataclass(frozen=True)
class Plain:
    text: str


@dataclass(frozen=True, init=False)
class Styled:
    text: str
    styles: tuple[str, ...]

    def __init__(self, text: str, *styles: str) -> None:
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "styles", tuple(styles))


Cell = Union[Plain, Styled]


def render_cell(cell: Cell | str) -> str:
    """Turn a cell into a styled string. Bare strings pass through."""
    if isinstance(cell, str):
        return cell
    if isinstance(cell, Styled):
        return style(cell.text, *cell.styles)
    return cell.text
