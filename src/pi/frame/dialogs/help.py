"""Keyboard help overlay."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pi.frame.dialogs.base import dialog_frame, indent, paint_dialog, restore_cursor
from pi.frame.frame import render_context
from pi.frame.selection import scroll_lines
from pi.frame.style import style
from pi.frame.utils import visible_width

if TYPE_CHECKING:
    from pi.frame.session import Session

PAGE_SIZE = 10
SCROLL_UP = "↑ scroll up"
SCROLL_DOWN = "↓ scroll down"


@dataclass(frozen=True)
class KeyBinding:
    key: str
    description: str


@dataclass(frozen=True)
class HelpSection:
    title: str
    bindings: Sequence[KeyBinding]


@dataclass(frozen=True)
class HelpContent:
    """What the help overlay shows for one screen."""

    screen_name: str
    description: str = ""
    sections: Sequence[HelpSection] = ()
    tips: Sequence[str] = field(default_factory=tuple)


def merge_help_content(*contents: HelpContent) -> HelpContent:
    """Combine several help contents; the first one names the screen."""
    if not contents:
        return HelpContent(screen_name="Help")
    first = contents[0]
    return HelpContent(
        screen_name=first.screen_name,
        description=first.description,
        sections=tuple(section for c in contents for section in c.sections),
        tips=tuple(tip for c in contents for tip in c.tips),
    )


def simple_help(screen_name: str, bindings: Sequence[KeyBinding]) -> HelpContent:
    return HelpContent(
        screen_name=screen_name,
        sections=(HelpSection("Keyboard Shortcuts", tuple(bindings)),),
    )


def help_lines(content: HelpContent) -> list[str]:
    """Flatten *content* into display lines, keys aligned in one column."""
    key_width = max(
        (visible_width(b.key) for s in content.sections for b in s.bindings),
        default=0,
    )
    lines: list[str] = []
    if content.description:
        lines.extend([style(content.description, "dim"), ""])

    for section in content.sections:
        lines.append(style(section.title, "bold", "warning"))
        for binding in section.bindings:
            pad = " " * (key_width - visible_width(binding.key))
            lines.append(f"  {style(binding.key + pad, 'accent')}  {binding.description}")
        lines.append("")

    if content.tips:
        lines.append(style("Tips", "bold", "success"))
        lines.extend(f"  {style('• ' + tip, 'dim')}" for tip in content.tips)
        lines.append("")
    return lines


async def show_help(session: Session, content: HelpContent) -> None:
    """Show *content* until a key other than a scroll key is pressed.

    Up/down scroll one line, page keys scroll ten.
    """
    lines = help_lines(content)
    offset = 0
    bindings = session.keybindings

    def visible_rows() -> int:
        return render_context(session).content_height

    def render() -> None:
        nonlocal offset
        viewport = scroll_lines(len(lines), offset, visible_rows())
        offset = viewport.scroll_offset
        body: list[str] = []
        if viewport.more_above:
            body.append(indent(style(SCROLL_UP, "dim")))
        body.extend(indent(lines[i]) for i in viewport.indices)
        if viewport.more_below:
            body.append(indent(style(SCROLL_DOWN, "dim")))
        paint_dialog(
            session,
            dialog_frame(
                session,
                title=style("?", "bold", "accent") + " HELP",
                description=content.screen_name,
                body=body,
                hints=["Press any key to close"],
                fill=True,
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
                offset -= 1
            elif bindings.matches(key, "down"):
                offset += 1
            elif bindings.matches(key, "pageUp"):
                offset -= PAGE_SIZE
            elif bindings.matches(key, "pageDown"):
                offset += PAGE_SIZE
            else:
                return
            render()
    finally:
        restore_cursor(session)
