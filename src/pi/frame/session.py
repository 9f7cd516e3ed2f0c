"""The interactive session: everything one screen shares.

A :class:`Session` is passed explicitly to every window and dialog. It owns
the render buffer, the keyboard capture, the redraw flag set by resize
notifications, and the stack of windows currently on screen.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

from pi.frame.config import FrameConfig
from pi.frame.errors import WindowStateError
from pi.frame.events import EventMultiplexer
from pi.frame.keybindings import KeyBindings
from pi.frame.keyboard import KeyboardInput
from pi.frame.render_buffer import RenderBuffer
from pi.frame.terminal import ProcessTerminal, Terminal

if TYPE_CHECKING:
    from pi.frame.window import Window

logger = logging.getLogger(__name__)


class TerminalSize(NamedTuple):
    columns: int
    rows: int


class Session:
    """One interactive terminal session.

    Parameters
    ----------
    terminal:
        Terminal to drive. Defaults to a :class:`ProcessTerminal` on
        stdin/stdout.
    config:
        Runtime configuration. Defaults to :meth:`FrameConfig.from_env`.
    keybindings:
        Action-to-key mapping. Defaults to the standard bindings.
    """

    def __init__(
        self,
        terminal: Terminal | None = None,
        *,
        config: FrameConfig | None = None,
        keybindings: KeyBindings | None = None,
    ) -> None:
        self.config = config if config is not None else FrameConfig.from_env()
        if terminal is None:
            terminal = ProcessTerminal(
                escape_timeout=self.config.escape_timeout,
                write_log=self.config.write_log,
            )
        self.terminal: Terminal = terminal
        self.keybindings = keybindings if keybindings is not None else KeyBindings()
        self.buffer = RenderBuffer(terminal.write)
        self.keyboard = KeyboardInput(terminal)
        self.events = EventMultiplexer(self)

        self.needs_redraw = False
        self.is_closing = False
        self._is_open = False
        self._windows: list[Window] = []

    # -- state --------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def keyboard_active(self) -> bool:
        return self.keyboard.capturing

    @property
    def size(self) -> TerminalSize:
        return TerminalSize(self.terminal.columns, self.terminal.rows)

    @property
    def windows(self) -> tuple[Window, ...]:
        return tuple(self._windows)

    def request_redraw(self) -> None:
        """Mark the screen stale; the next event loop iteration repaints it."""
        self.needs_redraw = True

    # -- lifecycle ----------------------------------------------------------

    def open(self) -> None:
        if self._is_open:
            return
        self._is_open = True
        self.is_closing = False
        self.terminal.add_resize_listener(self.request_redraw)

    def close(self) -> None:
        """Release input capture and restore the terminal.

        Every step is attempted even if an earlier one fails.
        """
        if not self._is_open:
            return
        self.is_closing = True

        try:
            self.keyboard.close()
        except Exception as exc:
            logger.warning("Failed to release keyboard capture: %s", exc)
        try:
            self.terminal.remove_resize_listener(self.request_redraw)
        except Exception as exc:
            logger.warning("Failed to remove resize listener: %s", exc)
        if self.buffer.collecting:
            self.buffer.cancel()
        try:
            self.terminal.show_cursor()
        except Exception as exc:
            logger.warning("Failed to restore cursor: %s", exc)

        self._is_open = False

    async def __aenter__(self) -> Session:
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # -- window stack -------------------------------------------------------

    def push_window(self, window: Window) -> None:
        """Register *window* as the top of the screen.

        Every window already on the stack must have paused its keyboard
        first; otherwise two screens would compete for the same input.
        """
        for other in self._windows:
            if not other.paused:
                raise WindowStateError(
                    f"Cannot start window {window.title!r}: "
                    f"{other.title!r} is {other.state.value}, not paused"
                )
        self.open()
        self._windows.append(window)

    def pop_window(self, window: Window) -> None:
        if window in self._windows:
            self._windows.remove(window)
