"""Single-choice list dialog."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, TypeVar

from pi.frame.dialogs.base import (
    Cancelled,
    Selected,
    as_items,
    dialog_frame,
    indent,
    info_rows,
    item_label,
    list_capacity,
    list_rows,
    paint_dialog,
    restore_cursor,
)
from pi.frame.keys import number_key
from pi.frame.selection import SelectableItem, SelectionModel
from pi.frame.style import style

if TYPE_CHECKING:
    from pi.frame.session import Session

T = TypeVar("T")

DEFAULT_HINTS = ["↑↓ Navigate", "⏎ Select", "q/⌫ Back"]
MAX_VISIBLE = 12


def _option_row(index: int, item: SelectableItem[T], focused: bool, numbered: bool) -> str:
    prefix = style("❯", "highlight") + " " if focused else "  "
    label = item_label(item.label, focused)
    number = style(str(index + 1), "dim") + " " if numbered and index < 9 else ""
    hint = " " + style(f"({item.hint})", "muted") if item.hint else ""
    return indent(prefix + number + label + hint)


async def select_menu(
    session: Session,
    title: str,
    options: Sequence[SelectableItem[T] | T],
    *,
    selected_index: int = 0,
    info_lines: Sequence[str] | None = None,
    allow_number_keys: bool | None = None,
    subtitle: str | None = None,
    description: str | None = None,
    hints: Sequence[str] | None = None,
    max_visible: int = MAX_VISIBLE,
) -> Selected[T] | Cancelled:
    """Let the user pick one option.

    Returns :class:`Selected` with the option's value, or :class:`Cancelled`
    on a back key. Disabled options are skipped while navigating and
    cannot be chosen; when every option is disabled, confirm does nothing.
    Number keys 1-9 pick an option directly (enabled by default for up to
    nine options).
    """
    items = as_items(options)
    numbered = allow_number_keys if allow_number_keys is not None else len(items) <= 9
    info = info_rows(info_lines)
    bindings = session.keybindings
    model = SelectionModel(items, list_capacity(session, len(info), max_visible), selected_index)

    def render() -> None:
        model.resize(list_capacity(session, len(info), max_visible))
        body = info + list_rows(model, lambda i, item, f: _option_row(i, item, f, numbered))
        paint_dialog(
            session,
            dialog_frame(
                session,
                title=title,
                subtitle=subtitle,
                description=description,
                body=body,
                hints=hints or DEFAULT_HINTS,
            ),
        )

    session.open()
    render()
    try:
        while True:
            key = await session.events.next_event()
            if key is None:
                render()
                continue

            if bindings.matches(key, "up"):
                model.move_previous()
            elif bindings.matches(key, "down"):
                model.move_next()
            elif bindings.matches(key, "pageUp"):
                model.page_up()
            elif bindings.matches(key, "pageDown"):
                model.page_down()
            elif bindings.matches(key, "confirm"):
                if model.selectable:
                    return Selected(model.focused_item().value)
                continue
            elif bindings.matches(key, "back"):
                return Cancelled()
            else:
                number = number_key(key) if numbered else None
                if number is not None and 1 <= number <= len(items):
                    item = items[number - 1]
                    if not item.disabled:
                        return Selected(item.value)
                continue
            render()
    finally:
        restore_cursor(session)
