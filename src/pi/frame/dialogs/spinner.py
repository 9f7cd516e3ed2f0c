"""Animated progress indicator for long-running awaitables."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, TypeVar

from pi.frame.dialogs.base import dialog_frame, paint_dialog, restore_cursor
from pi.frame.style import style

if TYPE_CHECKING:
    from pi.frame.session import Session

T = TypeVar("T")

SPINNER_DOTS = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
SPINNER_LINE = ("-", "\\", "|", "/")
SPINNER_ARC = ("◜", "◠", "◝", "◞", "◡", "◟")
SPINNER_CIRCLE = ("◐", "◓", "◑", "◒")


class Spinner:
    """Repaints a spinner frame every *interval* seconds until stopped.

    A pending resize is picked up on the next tick.
    """

    def __init__(
        self,
        session: Session,
        message: str,
        *,
        title: str = "",
        frames: Sequence[str] = SPINNER_DOTS,
        interval: float = 0.08,
    ) -> None:
        if not frames:
            raise ValueError("Spinner needs at least one frame")
        self._session = session
        self._title = title
        self._frames = tuple(frames)
        self._interval = interval
        self._index = 0
        self._task: asyncio.Task[None] | None = None
        self._stopped = False
        self.message = message

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def frame_index(self) -> int:
        return self._index

    def start(self) -> None:
        if self._task is not None:
            return
        self._session.open()
        self._render()
        self._task = asyncio.ensure_future(self._animate())

    def update(self, message: str) -> None:
        if self._stopped:
            return
        self.message = message
        self._render()

    async def stop(self, final_message: str | None = None) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if final_message:
            self._paint(style("✓", "success") + " " + final_message)
        restore_cursor(self._session)

    async def _animate(self) -> None:
        session = self._session
        while True:
            await asyncio.sleep(self._interval)
            self._index = (self._index + 1) % len(self._frames)
            session.needs_redraw = False
            self._render()

    def _render(self) -> None:
        frame = style(self._frames[self._index], "accent")
        self._paint(f"{frame} {self.message}")

    def _paint(self, line: str) -> None:
        paint_dialog(
            self._session,
            dialog_frame(
                self._session,
                title=self._title or "Working",
                body=[line],
                hints=[],
                center=True,
            ),
        )


async def run_with_spinner(
    session: Session,
    message: str,
    awaitable: Awaitable[T],
    *,
    success_message: str | None = None,
    frames: Sequence[str] = SPINNER_DOTS,
    interval: float = 0.08,
) -> T:
    """Await *awaitable* while a spinner animates.

    The success message is shown only when the awaitable completes; its
    exception, if any, propagates after the spinner stops.
    """
    spinner = Spinner(session, message, frames=frames, interval=interval)
    spinner.start()
    try:
        result = await awaitable
    except BaseException:
        await spinner.stop()
        raise
    await spinner.stop(success_message)
    return result
