"""Pieces every dialog shares: result types, frame assembly and list rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, TypeVar, Union

from pi.frame.frame import (
    INNER_PADDING,
    body_lines,
    compose_frame,
    footer_lines,
    header_lines,
    paint,
    render_context,
)
from pi.frame.selection import SelectableItem, SelectionModel
from pi.frame.style import Cell, Styled, render_cell, style

if TYPE_CHECKING:
    from pi.frame.session import Session

T = TypeVar("T")

MORE_ABOVE = "↑ more..."
MORE_BELOW = "↓ more..."


@dataclass(frozen=True)
class Selected(Generic[T]):
    value: T


@dataclass(frozen=True)
class Cancelled:
    pass


DialogResult = Union[Selected[T], Cancelled]


def as_items(options: Sequence[SelectableItem[T] | T]) -> list[SelectableItem[T]]:
    """Accept ready-made items or bare values (labelled with ``str()``)."""
    return [
        option if isinstance(option, SelectableItem) else SelectableItem(str(option), option)
        for option in options
    ]


def item_label(label: Cell | str, focused: bool) -> str:
    """Focused labels are bold; unfocused ones keep their own styling or dim."""
    text = label if isinstance(label, str) else label.text
    if focused:
        return style(text, "bold", "text")
    if isinstance(label, Styled):
        return render_cell(label)
    return style(text, "dim")


def indent(text: str) -> str:
    return " " * INNER_PADDING + text


def info_rows(info_lines: Sequence[str] | None) -> list[str]:
    if not info_lines:
        return []
    return [indent(style(line, "dim")) for line in info_lines] + [""]


def list_capacity(session: Session, reserved: int = 0, limit: int | None = None) -> int:
    """Rows left for a list once *reserved* content rows are taken."""
    rows = max(1, render_context(session).content_height - reserved)
    if limit is not None:
        rows = min(rows, max(limit, 1))
    return rows


def list_rows(
    model: SelectionModel[T],
    render_item: Callable[[int, SelectableItem[T], bool], str],
) -> list[str]:
    """Rows for the visible slice of *model*, with scroll indicators."""
    viewport = model.viewport
    rows: list[str] = []
    if viewport.more_above:
        rows.append(indent(style(MORE_ABOVE, "dim")))
    for index in viewport.indices:
        rows.append(render_item(index, model.items[index], index == viewport.focused_index))
    if viewport.more_below:
        rows.append(indent(style(MORE_BELOW, "dim")))
    return rows


def dialog_frame(
    session: Session,
    *,
    title: str,
    body: Sequence[str],
    hints: Sequence[str],
    subtitle: str | None = None,
    description: str | None = None,
    fill: bool = False,
    center: bool = False,
) -> list[str]:
    """Assemble a full dialog frame.

    The content area is sized to *body* unless *fill* asks for the full
    available height.
    """
    ctx = render_context(session)
    height = ctx.content_height if fill else max(1, min(len(body), ctx.content_height))
    return compose_frame(
        ctx.inner_width,
        header_lines(ctx.inner_width, title, subtitle, description),
        body_lines(body, ctx.inner_width, height, center=center),
        footer_lines(ctx.inner_width, hints),
    )


def paint_dialog(session: Session, rows: Sequence[str]) -> None:
    paint(session, rows, center_vertically=True)


def restore_cursor(session: Session) -> None:
    session.terminal.show_cursor()
