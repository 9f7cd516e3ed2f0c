"""Focus and viewport bookkeeping for scrollable lists.

Everything here is a pure function of the list, the focused index, the
scroll offset and the number of rows available. Dialogs decide what
"select" or "toggle" means; this module only keeps the focused row valid
and visible.

Viewport model: ``scroll_offset`` is the index of the first visible item.
When items are hidden above or below, one row at that edge is taken by a
"more" indicator, so the number of item rows (``capacity``) is
``max_visible`` minus one per hidden edge. The focused item is always one of
the rendered item rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pi.frame.errors import NoSelectableItems
from pi.frame.style import Cell

T = TypeVar("T")


@dataclass(frozen=True)
class SelectableItem(Generic[T]):
    label: Cell | str
    value: T
    disabled: bool = False
    hint: str | None = None


@dataclass(frozen=True)
class ScrollState:
    focused_index: int
    scroll_offset: int


@dataclass(frozen=True)
class Viewport:
    """Which items to draw and where the scroll indicators go."""

    focused_index: int
    scroll_offset: int
    start: int
    end: int
    more_above: bool
    more_below: bool
    capacity: int

    @property
    def state(self) -> ScrollState:
        return ScrollState(self.focused_index, self.scroll_offset)

    @property
    def indices(self) -> range:
        return range(self.start, self.end)


# ---------------------------------------------------------------------------
# Focus movement
# ---------------------------------------------------------------------------


def _enabled(items: Sequence[SelectableItem[Any]], index: int) -> bool:
    return not items[index].disabled


def has_enabled(items: Sequence[SelectableItem[Any]]) -> bool:
    return any(not item.disabled for item in items)


def initial_focus(items: Sequence[SelectableItem[Any]], start: int = 0) -> int:
    """First enabled index at or after *start*, wrapping to the head.

    Returns 0 when every item is disabled (or the list is empty); callers
    tell that case apart with :func:`has_enabled`.
    """
    count = len(items)
    if count == 0:
        return 0
    start = min(max(start, 0), count - 1)
    for index in range(start, count):
        if _enabled(items, index):
            return index
    for index in range(0, start):
        if _enabled(items, index):
            return index
    return 0


def _step(items: Sequence[SelectableItem[Any]], index: int, direction: int) -> int:
    count = len(items)
    if count == 0:
        return 0
    for offset in range(1, count):
        candidate = (index + direction * offset) % count
        if _enabled(items, candidate):
            return candidate
    return index


def move_next(items: Sequence[SelectableItem[Any]], index: int) -> int:
    """Next enabled index after *index*, wrapping past the tail.

    Returns *index* unchanged when no other item is enabled.
    """
    return _step(items, index, 1)


def move_previous(items: Sequence[SelectableItem[Any]], index: int) -> int:
    """Previous enabled index before *index*, wrapping past the head."""
    return _step(items, index, -1)


def _nearest_enabled(items: Sequence[SelectableItem[Any]], index: int, direction: int) -> int:
    """Closest enabled index from *index* towards *direction*, without wrapping.

    Falls back to searching the other way when the list edge is reached.
    """
    count = len(items)
    index = min(max(index, 0), count - 1)
    probe = index
    while 0 <= probe < count:
        if _enabled(items, probe):
            return probe
        probe += direction
    probe = index
    while 0 <= probe < count:
        if _enabled(items, probe):
            return probe
        probe -= direction
    return index


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------


# Below this many rows the scroll indicators would crowd out every item
MIN_ROWS_FOR_INDICATORS = 3


def _frame(total: int, offset: int, max_visible: int) -> tuple[bool, bool, int]:
    if max_visible < MIN_ROWS_FOR_INDICATORS:
        return False, False, max_visible
    more_above = offset > 0
    capacity = max_visible - (1 if more_above else 0)
    more_below = offset + capacity < total
    if more_below:
        capacity -= 1
    return more_above, more_below, max(capacity, 1)


def _max_offset(total: int, max_visible: int) -> int:
    if max_visible < MIN_ROWS_FOR_INDICATORS:
        return max(0, total - max_visible)
    # Last page: top indicator shown, bottom one not
    return max(0, total - (max_visible - 1))


def compute_viewport(total: int, focused: int, offset: int, max_visible: int) -> Viewport:
    """Scroll *offset* just enough to keep *focused* on an item row.

    A focused index past the visible rows becomes the last item row; one
    before them becomes the first. The indicator rows are re-derived after
    every adjustment since revealing or hiding an edge changes the capacity.
    With fewer than three rows no indicators are drawn at all.

    The offset is the first item row, so moving focus from 0 to 10 over 20
    items with five rows lands on offset 8 (items 8-10 between indicators).
    """
    max_visible = max(max_visible, 1)
    if total <= 0:
        return Viewport(0, 0, 0, 0, False, False, max_visible)

    focused = min(max(focused, 0), total - 1)

    if total <= max_visible:
        return Viewport(focused, 0, 0, total, False, False, max_visible)

    offset = min(max(offset, 0), _max_offset(total, max_visible))
    while True:
        more_above, more_below, capacity = _frame(total, offset, max_visible)
        if focused < offset:
            offset = focused
        elif focused >= offset + capacity:
            offset = focused - capacity + 1
        else:
            break

    end = min(total, offset + capacity)
    return Viewport(focused, offset, offset, end, more_above, more_below, capacity)


def scroll_lines(total: int, offset: int, max_visible: int) -> Viewport:
    """Viewport over *total* lines with no focus, for plain scrolling.

    *offset* is clamped so the last page never leaves rows empty.
    ``focused_index`` of the result is -1.
    """
    max_visible = max(max_visible, 1)
    if total <= max_visible:
        return Viewport(-1, 0, 0, max(total, 0), False, False, max_visible)

    offset = min(max(offset, 0), _max_offset(total, max_visible))
    more_above, more_below, capacity = _frame(total, offset, max_visible)
    end = min(total, offset + capacity)
    return Viewport(-1, offset, offset, end, more_above, more_below, capacity)


# ---------------------------------------------------------------------------
# Stateful wrapper
# ---------------------------------------------------------------------------


class SelectionModel(Generic[T]):
    """Mutable focus/scroll state over a fixed list of items.

    Parameters
    ----------
    items:
        The list. Its contents do not change for the lifetime of the model.
    max_visible:
        Rows available for items plus scroll indicators. Can be changed
        later with :meth:`resize`.
    start:
        Requested initial focus.
    """

    def __init__(
        self,
        items: Sequence[SelectableItem[T]],
        max_visible: int,
        start: int = 0,
    ) -> None:
        self.items = list(items)
        self._max_visible = max(max_visible, 1)
        self._focused = initial_focus(self.items, start)
        self._offset = 0
        self._viewport = self._recompute()

    # -- inspection ---------------------------------------------------------

    @property
    def selectable(self) -> bool:
        """False when no item can ever be selected."""
        return has_enabled(self.items)

    @property
    def focused_index(self) -> int:
        return self._focused

    @property
    def scroll_offset(self) -> int:
        return self._offset

    @property
    def state(self) -> ScrollState:
        return ScrollState(self._focused, self._offset)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def focused_item(self) -> SelectableItem[T]:
        if not self.selectable:
            raise NoSelectableItems("All items are disabled")
        return self.items[self._focused]

    # -- movement -----------------------------------------------------------

    def move_next(self) -> int:
        self._focused = move_next(self.items, self._focused)
        self._viewport = self._recompute()
        return self._focused

    def move_previous(self) -> int:
        self._focused = move_previous(self.items, self._focused)
        self._viewport = self._recompute()
        return self._focused

    def page_down(self) -> int:
        if self.selectable:
            target = min(self._focused + self._viewport.capacity, len(self.items) - 1)
            self._focused = _nearest_enabled(self.items, target, -1)
            self._viewport = self._recompute()
        return self._focused

    def page_up(self) -> int:
        if self.selectable:
            target = max(self._focused - self._viewport.capacity, 0)
            self._focused = _nearest_enabled(self.items, target, 1)
            self._viewport = self._recompute()
        return self._focused

    def focus(self, index: int) -> bool:
        """Focus *index* if it names an enabled item."""
        if not 0 <= index < len(self.items) or self.items[index].disabled:
            return False
        self._focused = index
        self._viewport = self._recompute()
        return True

    def resize(self, max_visible: int) -> None:
        self._max_visible = max(max_visible, 1)
        self._viewport = self._recompute()

    def _recompute(self) -> Viewport:
        viewport = compute_viewport(len(self.items), self._focused, self._offset, self._max_visible)
        self._offset = viewport.scroll_offset
        return viewport
