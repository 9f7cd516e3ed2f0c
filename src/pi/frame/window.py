"""Window lifecycle controller.

A :class:`Window` owns one interactive screen: it paints the frame around
a content callback, routes keys to the caller's handler and to the default
help/back handling, repaints on resize, and tears everything down exactly
once on close.

State machine::

    MOUNTED -> RUNNING -> (PAUSED <-> RUNNING) -> CLOSING -> CLOSED
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Union

from pi.frame.dialogs.help import HelpContent, show_help
from pi.frame.errors import WindowStateError
from pi.frame.frame import (
    RenderContext,
    body_lines,
    compose_frame,
    footer_lines,
    header_lines,
    paint,
    render_context,
)
from pi.frame.keyboard import KeyboardSubscription, KeypressWait
from pi.frame.keys import KeyEvent

if TYPE_CHECKING:
    from pi.frame.session import Session

logger = logging.getLogger(__name__)

RenderCallback = Callable[[RenderContext], Union[Sequence[str], None]]
KeypressCallback = Callable[
    [KeyEvent, "WindowActions"],
    Union[bool, None, Awaitable[Union[bool, None]]],
]
MountCallback = Callable[["WindowActions"], Union[None, Awaitable[None]]]
UnmountCallback = Callable[[], None]


class WindowState(enum.Enum):
    MOUNTED = "mounted"
    RUNNING = "running"
    PAUSED = "paused"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class WindowConfig:
    """Everything a window needs to know about its content."""

    title: str
    render: RenderCallback
    subtitle: str | None = None
    description: str | None = None
    # Footer hints such as "Space Play/Pause"; the first word is the key
    hints: list[str] = field(default_factory=list)
    # Enables the help key
    help: HelpContent | None = None
    center_content: bool = False
    # Runs before the default key handling; return True to skip it
    on_keypress: KeypressCallback | None = None
    on_mount: MountCallback | None = None
    on_unmount: UnmountCallback | None = None


class WindowActions:
    """The operations content owners may perform on their window."""

    def __init__(self, window: Window) -> None:
        self._window = window

    def redraw(self) -> None:
        self._window.redraw()

    def close(self) -> None:
        self._window.close()

    def pause_keyboard(self) -> None:
        self._window.pause_keyboard()

    def resume_keyboard(self) -> None:
        self._window.resume_keyboard()


class Window:
    """One interactive screen bound to a :class:`~pi.frame.session.Session`."""

    def __init__(self, session: Session, config: WindowConfig) -> None:
        self.session = session
        self.config = config
        self.actions = WindowActions(self)

        self._state = WindowState.MOUNTED
        self._subscription: KeyboardSubscription | None = None
        self._inbox: asyncio.Queue[KeyEvent] = asyncio.Queue()
        self._wakeup: asyncio.Future[None] | None = None
        self._mount_task: asyncio.Future[Any] | None = None
        self._dispatching = False
        self._redraw_pending = False

    # -- state --------------------------------------------------------------

    @property
    def title(self) -> str:
        return self.config.title

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def paused(self) -> bool:
        return self._state is WindowState.PAUSED

    @property
    def closed(self) -> bool:
        return self._state is WindowState.CLOSED

    # -- run ----------------------------------------------------------------

    async def run(self) -> None:
        """Show the window and return once it has closed.

        Exceptions from the content callback or the key handler close the
        window (restoring the terminal) and then propagate.
        """
        if self._state is not WindowState.MOUNTED:
            raise WindowStateError(
                f"Window {self.title!r} cannot run: it is {self._state.value}"
            )

        session = self.session
        session.push_window(self)
        try:
            self._render()
            self._attach_keyboard()
            self._state = WindowState.RUNNING
            self._start_mount()
            await self._event_loop()
        except BaseException:
            self.close()
            raise
        finally:
            session.pop_window(self)

    async def _event_loop(self) -> None:
        loop = asyncio.get_running_loop()
        events = self.session.events

        while self._state in (WindowState.RUNNING, WindowState.PAUSED):
            wakeup: asyncio.Future[None] = loop.create_future()
            self._wakeup = wakeup

            if self._state is WindowState.PAUSED:
                # A modal owns the screen and the redraw flag until resume
                await wakeup
                continue

            event = await events.next_event(
                source=lambda: KeypressWait.from_queue(self._inbox),
                until=wakeup,
            )
            if self._state is not WindowState.RUNNING:
                continue
            if event is None:
                if not wakeup.done():
                    self._render()
                continue
            await self._dispatch(event)

    def _wake(self) -> None:
        if self._wakeup is not None and not self._wakeup.done():
            self._wakeup.set_result(None)

    # -- key dispatch -------------------------------------------------------

    async def _dispatch(self, event: KeyEvent) -> None:
        config = self.config
        bindings = self.session.keybindings

        self._dispatching = True
        try:
            if config.on_keypress is not None:
                result = config.on_keypress(event, self.actions)
                if inspect.isawaitable(result):
                    result = await result
                if result is True:
                    return

            if self._state is not WindowState.RUNNING:
                return

            if config.help is not None and bindings.matches(event, "help"):
                await self._show_help(config.help)
            elif bindings.matches(event, "back"):
                self.close()
        finally:
            self._dispatching = False

        if self._redraw_pending and self._state is WindowState.RUNNING:
            self._redraw_pending = False
            self._render()

    async def _show_help(self, content: HelpContent) -> None:
        self.pause_keyboard()
        try:
            await show_help(self.session, content)
        finally:
            if self._state is WindowState.PAUSED:
                self.resume_keyboard()

    # -- actions ------------------------------------------------------------

    def redraw(self) -> None:
        """Repaint now, or right after the key handler currently running."""
        if self._state in (WindowState.CLOSING, WindowState.CLOSED):
            return
        if self._dispatching or self._state is WindowState.PAUSED:
            self._redraw_pending = True
            return
        self._render()

    def pause_keyboard(self) -> None:
        """Release input capture so a modal can install its own."""
        if self._state is not WindowState.RUNNING:
            return
        self._detach_keyboard()
        self._state = WindowState.PAUSED
        self._wake()

    def resume_keyboard(self) -> None:
        """Take input capture back and repaint whatever the modal drew."""
        if self._state is not WindowState.PAUSED:
            return
        self._attach_keyboard()
        self._state = WindowState.RUNNING
        self._redraw_pending = False
        self.redraw()
        self._wake()

    def close(self) -> None:
        """Tear the window down. Only the first call has any effect."""
        if self._state in (WindowState.CLOSING, WindowState.CLOSED):
            return
        self._state = WindowState.CLOSING

        task = self._mount_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

        if self.config.on_unmount is not None:
            try:
                self.config.on_unmount()
            except Exception:
                logger.exception("on_unmount hook failed for window %r", self.title)

        try:
            self._detach_keyboard()
        except Exception as exc:
            logger.warning("Failed to release keyboard for window %r: %s", self.title, exc)

        session = self.session
        if session.buffer.collecting:
            session.buffer.cancel()
        try:
            session.terminal.show_cursor()
            session.terminal.clear_screen()
        except Exception as exc:
            logger.warning("Failed to restore terminal for window %r: %s", self.title, exc)

        self._state = WindowState.CLOSED
        self._wake()

    # -- internals ----------------------------------------------------------

    def _attach_keyboard(self) -> None:
        self._inbox = asyncio.Queue()
        self._subscription = self.session.keyboard.on_keypress(self._inbox.put_nowait)

    def _detach_keyboard(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.close()

    def _start_mount(self) -> None:
        hook = self.config.on_mount
        if hook is None:
            return
        try:
            result = hook(self.actions)
        except Exception:
            logger.exception("on_mount hook failed for window %r", self.title)
            return
        if inspect.isawaitable(result):
            self._mount_task = asyncio.ensure_future(result)
            self._mount_task.add_done_callback(self._on_mount_done)

    def _on_mount_done(self, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("on_mount hook failed for window %r", self.title, exc_info=exc)

    def _render(self) -> None:
        config = self.config
        ctx = render_context(self.session)
        lines = config.render(ctx) or []
        rows = compose_frame(
            ctx.inner_width,
            header_lines(ctx.inner_width, config.title, config.subtitle, config.description),
            body_lines(lines, ctx.inner_width, ctx.content_height, center=config.center_content),
            footer_lines(ctx.inner_width, config.hints),
        )
        paint(self.session, rows)


def create_window(session: Session, config: WindowConfig) -> Window:
    return Window(session, config)
