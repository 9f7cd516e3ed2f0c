"""Informational message dialog."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal

from pi.frame.dialogs.base import dialog_frame, indent, paint_dialog, restore_cursor
from pi.frame.style import style

if TYPE_CHECKING:
    from pi.frame.session import Session

MessageKind = Literal["info", "success", "warning", "error"]

_ICONS: dict[str, tuple[str, str]] = {
    "info": ("●", "accent"),
    "success": ("✓", "success"),
    "warning": ("!", "warning"),
    "error": ("✗", "error"),
}


def message_frame(
    session: Session,
    title: str,
    lines: Sequence[str],
    kind: MessageKind,
    *,
    wait_for_key: bool,
) -> list[str]:
    icon, color = _ICONS[kind]
    heading = style(icon, color) + " " + title if title else style(icon, color)
    hints = ["Press any key to continue..."] if wait_for_key else []
    return dialog_frame(
        session,
        title=heading,
        body=[indent(line) for line in lines] + [""],
        hints=hints,
    )


async def show_message(
    session: Session,
    title: str,
    message: str | Sequence[str] = (),
    kind: MessageKind = "info",
    *,
    wait_for_key: bool = True,
) -> None:
    """Show a message, then wait for any key unless *wait_for_key* is off."""
    lines = [message] if isinstance(message, str) else list(message)
    if kind not in _ICONS:
        raise ValueError(f"Unknown message kind {kind!r}")

    def render() -> None:
        paint_dialog(session, message_frame(session, title, lines, kind, wait_for_key=wait_for_key))

    session.open()
    render()
    if not wait_for_key:
        return
    try:
        while await session.events.next_event() is None:
            render()
    finally:
        restore_cursor(session)
