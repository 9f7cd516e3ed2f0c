"""Yes/no question dialog."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from pi.frame.dialogs.base import dialog_frame, paint_dialog, restore_cursor
from pi.frame.style import style

if TYPE_CHECKING:
    from pi.frame.session import Session

DEFAULT_HINTS = ["←→ Switch", "⏎ Choose", "y Yes", "n No", "q Back"]


def _buttons(confirm_label: str, cancel_label: str, choice: bool) -> str:
    def button(label: str, active: bool) -> str:
        text = f" {label} "
        return style(text, "inverse", "bold") if active else style(text, "dim")

    return button(confirm_label, choice) + "    " + button(cancel_label, not choice)


async def confirm(
    session: Session,
    title: str,
    *,
    message: Sequence[str] | str | None = None,
    default: bool = False,
    confirm_label: str = "Yes",
    cancel_label: str = "No",
    description: str | None = None,
    hints: Sequence[str] | None = None,
) -> bool:
    """Ask a yes/no question.

    Left/right switch between the two buttons and enter accepts the
    highlighted one. ``y`` and ``n`` answer directly; a back key answers
    no.
    """
    if isinstance(message, str):
        message = [message]
    lines = list(message or [])
    choice = default
    bindings = session.keybindings

    def render() -> None:
        body = lines + ([""] if lines else [])
        body.append(_buttons(confirm_label, cancel_label, choice))
        paint_dialog(
            session,
            dialog_frame(
                session,
                title=style("?", "bold", "warning") + " " + title,
                description=description,
                body=body,
                hints=hints or DEFAULT_HINTS,
                center=True,
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

            if bindings.matches(key, "left") or bindings.matches(key, "right"):
                choice = not choice
                render()
            elif bindings.matches(key, "confirm"):
                return choice
            elif key.char in ("y", "Y"):
                return True
            elif key.char in ("n", "N"):
                return False
            elif bindings.matches(key, "back"):
                return False
    finally:
        restore_cursor(session)
