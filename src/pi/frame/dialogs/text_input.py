"""Single-line text entry dialog."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Callable

from pi.frame.dialogs.base import (
    dialog_frame,
    indent,
    info_rows,
    paint_dialog,
    restore_cursor,
)
from pi.frame.keyboard import KeypressWait
from pi.frame.keys import KeyEvent
from pi.frame.style import style

if TYPE_CHECKING:
    from pi.frame.session import Session

DEFAULT_HINTS = ["⏎ Submit", "⌫ Delete/Back", "Esc Cancel"]
CURSOR = "▋"
MASK_CHAR = "•"

Validator = Callable[[str], "str | None"]


def _input_row(value: str, placeholder: str, mask: str | None) -> str:
    prompt = style("›", "highlight") + " "
    cursor = style(CURSOR, "accent")
    if value:
        shown = mask * len(value) if mask else value
        return indent(prompt + shown + cursor)
    return indent(prompt + cursor + (style(placeholder, "muted") if placeholder else ""))


async def text_input(
    session: Session,
    title: str,
    *,
    default: str = "",
    placeholder: str = "",
    info_lines: Sequence[str] | None = None,
    validate: Validator | None = None,
    max_length: int | None = None,
    mask: str | None = None,
    description: str | None = None,
    hints: Sequence[str] | None = None,
) -> str | None:
    """Read a line of text.

    Returns the submitted text, or ``None`` when cancelled (a cancel key,
    or backspace on an empty value). *validate* returns an error message
    to keep the dialog open, or ``None`` to accept.

    Keys are captured through a persistent subscription so that fast
    typing and pasted text are not lost between loop iterations.
    """
    value = default
    error: str | None = None
    info = info_rows(info_lines)
    bindings = session.keybindings

    def render() -> None:
        body = info + [_input_row(value, placeholder, mask)]
        if error:
            body += ["", indent(style(f"! {error}", "error"))]
        paint_dialog(
            session,
            dialog_frame(
                session,
                title=title,
                description=description,
                body=body,
                hints=hints or DEFAULT_HINTS,
            ),
        )

    session.open()
    inbox: asyncio.Queue[KeyEvent] = asyncio.Queue()
    subscription = session.keyboard.on_keypress(inbox.put_nowait)
    render()
    try:
        while True:
            key = await session.events.next_event(source=lambda: KeypressWait.from_queue(inbox))
            if key is None:
                render()
                continue

            if bindings.matches(key, "confirm"):
                if validate is not None:
                    error = validate(value)
                    if error:
                        render()
                        continue
                return value
            if bindings.matches(key, "cancel"):
                return None
            if key.name == "backspace":
                if not value:
                    return None
                value = value[:-1]
                error = None
                render()
                continue
            if key.printable and key.char:
                if max_length is not None and len(value) + len(key.char) > max_length:
                    continue
                value += key.char
                error = None
                render()
    finally:
        subscription.close()
        restore_cursor(session)


async def password_input(session: Session, title: str, **kwargs: object) -> str | None:
    """:func:`text_input` with every character shown as a bullet."""
    return await text_input(session, title, mask=MASK_CHAR, **kwargs)  # type: ignore[arg-type]
