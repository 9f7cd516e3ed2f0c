"""Keyboard input subsystem.

A session owns at most one raw-mode capture at a time. It is either a
persistent subscription (:meth:`KeyboardInput.on_keypress`) or a one-shot
wait (:meth:`KeyboardInput.wait_for_keypress`). Each capture starts the
terminal's input on creation and stops it on release, so pausing a window
and letting a modal install its own capture hands raw mode over cleanly.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from typing import TYPE_CHECKING, Any, Callable

from pi.frame.errors import HandlerConflict
from pi.frame.keys import KeyEvent, parse_key_event

if TYPE_CHECKING:
    from pi.frame.terminal import Terminal

logger = logging.getLogger(__name__)

KeyHandler = Callable[[KeyEvent], None]


class _Capture:
    """Identity token for one raw-mode capture."""

    __slots__ = ("handler", "kind")

    def __init__(self, handler: KeyHandler, kind: str) -> None:
        self.handler = handler
        self.kind = kind


class KeypressWait:
    """A pending one-shot keypress.

    Await it for the :class:`KeyEvent`. :meth:`cancel` releases the
    underlying capture immediately; calling it after the wait resolved is a
    no-op.
    """

    def __init__(
        self,
        future: asyncio.Future[KeyEvent],
        release: Callable[[], None] | None = None,
    ) -> None:
        self.future = future
        self._release = release

    @classmethod
    def from_queue(cls, queue: asyncio.Queue[KeyEvent]) -> KeypressWait:
        """Wait for the next event pushed onto *queue*."""
        return cls(asyncio.ensure_future(queue.get()))

    def __await__(self) -> Generator[Any, None, KeyEvent]:
        return self.future.__await__()

    @property
    def done(self) -> bool:
        return self.future.done()

    def cancel(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()
        if not self.future.done():
            self.future.cancel()


class KeyboardSubscription:
    """Handle for a persistent capture created by :meth:`KeyboardInput.on_keypress`."""

    def __init__(self, keyboard: KeyboardInput, capture: _Capture) -> None:
        self._keyboard = keyboard
        self._capture: _Capture | None = capture

    @property
    def active(self) -> bool:
        return self._capture is not None and self._keyboard._capture is self._capture

    def close(self) -> None:
        capture, self._capture = self._capture, None
        if capture is not None:
            self._keyboard._release(capture)


class KeyboardInput:
    """Parses terminal input into :class:`KeyEvent` values for one session."""

    def __init__(self, terminal: Terminal) -> None:
        self._terminal = terminal
        self._capture: _Capture | None = None

    @property
    def active_captures(self) -> int:
        return 0 if self._capture is None else 1

    @property
    def capturing(self) -> bool:
        return self._capture is not None

    # -- captures -----------------------------------------------------------

    def on_keypress(self, handler: KeyHandler) -> KeyboardSubscription:
        """Deliver every keypress to *handler* until the subscription closes."""
        capture = self._acquire(handler, "subscription")
        return KeyboardSubscription(self, capture)

    def wait_for_keypress(self) -> KeypressWait:
        """Capture exactly one keypress.

        The capture is released as soon as the event arrives or the wait is
        cancelled, whichever happens first.
        """
        future: asyncio.Future[KeyEvent] = asyncio.get_running_loop().create_future()
        capture: _Capture | None = None

        def deliver(event: KeyEvent) -> None:
            if capture is not None:
                self._release(capture)
            if not future.done():
                future.set_result(event)

        capture = self._acquire(deliver, "wait")
        return KeypressWait(future, release=lambda: self._release(capture))

    async def next_key(self) -> KeyEvent:
        wait = self.wait_for_keypress()
        try:
            return await wait
        finally:
            wait.cancel()

    def close(self) -> None:
        """Release whatever capture is active."""
        if self._capture is not None:
            self._release(self._capture)

    # -- internals ----------------------------------------------------------

    def _acquire(self, handler: KeyHandler, kind: str) -> _Capture:
        if self._capture is not None:
            raise HandlerConflict(
                f"Cannot start a keyboard {kind}: a {self._capture.kind} already holds raw mode"
            )
        capture = _Capture(handler, kind)
        self._capture = capture
        try:
            self._terminal.start(lambda data: self._on_input(capture, data))
        except BaseException:
            self._capture = None
            raise
        return capture

    def _release(self, capture: _Capture) -> None:
        if self._capture is not capture:
            return
        self._capture = None
        self._terminal.stop()

    def _on_input(self, capture: _Capture, data: str) -> None:
        # Input for a released capture never reaches its handler
        if self._capture is not capture:
            return
        event = parse_key_event(data)
        try:
            capture.handler(event)
        except Exception:
            logger.exception("Keyboard handler failed for %r", event.key_id or data)
