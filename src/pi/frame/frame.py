"""Frame layout and painting.

A frame is a rounded box: header (blank, title, description, divider),
content rows, footer (divider, blank, hints, blank) and the two border
rows. The helpers here are pure and return lists of styled rows;
:func:`paint` is the only function that produces output, and it does so
through the session's render buffer as a single write.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pi.frame.style import style
from pi.frame.terminal import CLEAR_SCREEN, HIDE_CURSOR
from pi.frame.utils import center_to_width, pad_to_width, visible_width

if TYPE_CHECKING:
    from pi.frame.session import Session

HEADER_LINES = 4
FOOTER_LINES = 4
BORDER_LINES = 2
FRAME_OVERHEAD = HEADER_LINES + FOOTER_LINES + BORDER_LINES

# Left margin inside the frame for hint and list rows
INNER_PADDING = 2

TOP_LEFT = "╭"
TOP_RIGHT = "╮"
BOTTOM_LEFT = "╰"
BOTTOM_RIGHT = "╯"
HORIZONTAL = "─"
VERTICAL = "│"
TEE_LEFT = "├"
TEE_RIGHT = "┤"

_MIN_WIDTH = 4
_MIN_HEIGHT = FRAME_OVERHEAD + 1


@dataclass(frozen=True)
class FrameDimensions:
    width: int
    height: int
    inner_width: int
    inner_height: int


@dataclass(frozen=True)
class RenderContext:
    """What a content callback gets to work with.

    ``content_height`` is the number of rows left for content once the
    header, footer and borders are drawn.
    """

    inner_width: int
    inner_height: int
    content_height: int


def frame_dimensions(session: Session) -> FrameDimensions:
    config = session.config
    columns, rows = session.size
    width = max(min(columns - 2 * config.padding_x, config.max_width), _MIN_WIDTH)
    height = max(rows - 2 * config.padding_y, _MIN_HEIGHT)
    return FrameDimensions(width, height, width - 2, height - 2)


def render_context(session: Session) -> RenderContext:
    dims = frame_dimensions(session)
    return RenderContext(
        inner_width=dims.inner_width,
        inner_height=dims.inner_height,
        content_height=max(1, dims.height - FRAME_OVERHEAD),
    )


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def _border(text: str) -> str:
    return style(text, "muted")


def top_border(inner_width: int) -> str:
    return _border(TOP_LEFT + HORIZONTAL * inner_width + TOP_RIGHT)


def bottom_border(inner_width: int) -> str:
    return _border(BOTTOM_LEFT + HORIZONTAL * inner_width + BOTTOM_RIGHT)


def divider(inner_width: int) -> str:
    return _border(TEE_LEFT + HORIZONTAL * inner_width + TEE_RIGHT)


def framed(content: str, inner_width: int, *, center: bool = False) -> str:
    """Put *content* between the side borders, clipped or padded to fit."""
    body = center_to_width(content, inner_width) if center else pad_to_width(content, inner_width)
    return _border(VERTICAL) + body + _border(VERTICAL)


def empty_row(inner_width: int) -> str:
    return framed("", inner_width)


def format_hints(hints: Sequence[str]) -> str:
    """Dim the key part (first word) of each hint and join them.

    ``["Space Play/Pause", "q Back"]`` renders the keys ``Space`` and ``q``
    dimmed.
    """
    parts: list[str] = []
    for hint in hints:
        key, sep, action = hint.partition(" ")
        parts.append(style(key, "dim") + sep + action)
    return "  ".join(parts)


def header_lines(
    inner_width: int,
    title: str,
    subtitle: str | None = None,
    description: str | None = None,
) -> list[str]:
    title_line = style(title, "bold", "accent")
    if subtitle:
        title_line += "  " + style(subtitle, "dim")
    return [
        empty_row(inner_width),
        framed(title_line, inner_width, center=True),
        framed(style(description, "muted"), inner_width, center=True)
        if description
        else empty_row(inner_width),
        divider(inner_width),
    ]


def footer_lines(inner_width: int, hints: Sequence[str]) -> list[str]:
    return [
        divider(inner_width),
        empty_row(inner_width),
        framed(" " * INNER_PADDING + format_hints(hints), inner_width),
        empty_row(inner_width),
    ]


def body_lines(
    lines: Sequence[str],
    inner_width: int,
    height: int,
    *,
    center: bool = False,
) -> list[str]:
    """Frame *lines*, vertically centered within *height* rows.

    Lines beyond *height* are dropped.
    """
    visible = list(lines)[:height]
    extra = max(0, height - len(visible))
    top = extra // 2
    rows = [empty_row(inner_width)] * top
    rows.extend(framed(line, inner_width, center=center) for line in visible)
    rows.extend([empty_row(inner_width)] * (extra - top))
    return rows


def compose_frame(
    inner_width: int,
    header: Sequence[str],
    body: Sequence[str],
    footer: Sequence[str],
) -> list[str]:
    return [top_border(inner_width), *header, *body, *footer, bottom_border(inner_width)]


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def paint(session: Session, rows: Sequence[str], *, center_vertically: bool = False) -> None:
    """Clear the screen and draw *rows* as one buffered frame.

    Rows are centered horizontally. The top margin is the configured
    vertical padding, or half the free space with *center_vertically*.
    """
    config = session.config
    columns, term_rows = session.size
    width = visible_width(rows[0]) if rows else 0
    left = max(config.padding_x, (columns - width) // 2)
    top = config.padding_y
    if center_vertically:
        top = max(top, (term_rows - len(rows)) // 2)

    with session.buffer.frame() as buf:
        buf.write(CLEAR_SCREEN)
        buf.write(HIDE_CURSOR)
        for _ in range(top):
            buf.write_line()
        margin = " " * left
        for index, row in enumerate(rows):
            if index < len(rows) - 1:
                buf.write_line(margin + row)
            else:
                buf.write(margin + row)
