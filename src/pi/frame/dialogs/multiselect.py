"""Checkbox list dialog."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
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

CHECKED = "☑"
UNCHECKED = "☐"
DISABLED = "☒"

DEFAULT_HINTS = ["↑↓ Navigate", "Space Toggle", "a All", "n None", "⏎ Confirm", "q Back"]
MAX_VISIBLE = 12


class CheckedSet:
    """Checked indices with an optional upper bound.

    Disabled items can never be checked.
    """

    def __init__(
        self,
        items: Sequence[SelectableItem[object]],
        checked: Iterable[int] = (),
        max_selections: int | None = None,
    ) -> None:
        self._items = items
        self.max_selections = max_selections
        self._checked: set[int] = set()
        for index in checked:
            self.add(index)

    def __contains__(self, index: object) -> bool:
        return index in self._checked

    def __len__(self) -> int:
        return len(self._checked)

    def sorted(self) -> list[int]:
        return sorted(self._checked)

    def _full(self) -> bool:
        return self.max_selections is not None and len(self._checked) >= self.max_selections

    def add(self, index: int) -> bool:
        if not 0 <= index < len(self._items) or self._items[index].disabled:
            return False
        if index in self._checked:
            return True
        if self._full():
            return False
        self._checked.add(index)
        return True

    def toggle(self, index: int) -> bool:
        """Flip *index*. Returns False when the flip was refused."""
        if index in self._checked:
            self._checked.discard(index)
            return True
        return self.add(index)

    def select_all(self) -> None:
        for index in range(len(self._items)):
            if self._full():
                break
            self.add(index)

    def clear(self) -> None:
        self._checked.clear()


def _option_row(index: int, item: SelectableItem[T], focused: bool, checked: CheckedSet) -> str:
    prefix = style("❯", "highlight") + " " if focused else "  "
    if item.disabled:
        box = style(DISABLED, "dim")
    elif index in checked:
        box = style(CHECKED, "success")
    else:
        box = UNCHECKED
    label = item_label(item.label, focused)
    hint = " " + style(f"({item.hint})", "muted") if item.hint else ""
    return indent(f"{prefix}{box} {label}{hint}")


def _status_row(checked: CheckedSet, min_selections: int, max_selections: int | None) -> str:
    text = f"{len(checked)} selected"
    if max_selections is not None:
        text += f" (max {max_selections})"
    if len(checked) < min_selections:
        return indent(style(f"{text}, choose at least {min_selections}", "warning"))
    return indent(style(text, "muted"))


async def multi_select(
    session: Session,
    title: str,
    options: Sequence[SelectableItem[T] | T],
    *,
    checked: Iterable[int] = (),
    focused_index: int = 0,
    info_lines: Sequence[str] | None = None,
    min_selections: int = 0,
    max_selections: int | None = None,
    allow_number_keys: bool | None = None,
    subtitle: str | None = None,
    description: str | None = None,
    hints: Sequence[str] | None = None,
    max_visible: int = MAX_VISIBLE,
) -> Selected[list[T]] | Cancelled:
    """Let the user check any number of options.

    Returns :class:`Selected` holding the checked values in list order, or
    :class:`Cancelled`. Confirm is refused until at least *min_selections*
    options are checked; checking stops at *max_selections*.
    """
    items = as_items(options)
    numbered = allow_number_keys if allow_number_keys is not None else len(items) <= 9
    checked_set = CheckedSet(items, checked, max_selections)
    info = info_rows(info_lines)
    # Status row plus the blank line above it
    reserved = len(info) + 2
    bindings = session.keybindings
    model = SelectionModel(items, list_capacity(session, reserved, max_visible), focused_index)

    def render() -> None:
        model.resize(list_capacity(session, reserved, max_visible))
        body = info + list_rows(model, lambda i, item, f: _option_row(i, item, f, checked_set))
        body += ["", _status_row(checked_set, min_selections, max_selections)]
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
            elif bindings.matches(key, "toggle"):
                if model.selectable:
                    checked_set.toggle(model.focused_index)
            elif bindings.matches(key, "confirm"):
                if len(checked_set) >= min_selections:
                    return Selected([items[i].value for i in checked_set.sorted()])
            elif bindings.matches(key, "back"):
                return Cancelled()
            elif bindings.matches(key, "selectAll"):
                checked_set.select_all()
            elif bindings.matches(key, "selectNone"):
                checked_set.clear()
            else:
                number = number_key(key) if numbered else None
                if number is None or not 1 <= number <= len(items):
                    continue
                checked_set.toggle(number - 1)
            render()
    finally:
        restore_cursor(session)
