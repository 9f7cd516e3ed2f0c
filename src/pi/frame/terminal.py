"""Terminal I/O boundary.

The runtime depends only on the :class:`Terminal` protocol: raw-mode input
capture, resize notification, size queries and a raw ``write``. The escape
sequences for cursor visibility and screen clearing are exported as
constants so frame painting can route them through the render buffer.

:class:`ProcessTerminal` is the stdin/stdout implementation.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import signal
import sys
import termios
import tty
from typing import Any, Callable, Protocol

from pi.frame.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START, StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[2J\x1b[H"
CURSOR_HOME = "\x1b[H"

# Signals whose default action would leave the tty in raw mode
FATAL_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self, on_input: Callable[[str], None]) -> None: ...

    def stop(self) -> None: ...

    def add_resize_listener(self, listener: Callable[[], None]) -> None: ...

    def remove_resize_listener(self, listener: Callable[[], None]) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by ``sys.stdin``/``sys.stdout``.

    Input capture (raw mode, bracketed paste and the stdin reader) is tied
    to :meth:`start`/:meth:`stop`. Resize listeners are independent of
    capture: they stay installed while a modal pauses input.
    """

    def __init__(self, *, escape_timeout: float = 0.01, write_log: str = "") -> None:
        self._input_handler: Callable[[str], None] | None = None
        self._resize_listeners: list[Callable[[], None]] = []
        self._stdin_buffer: StdinBuffer | None = None
        self._escape_timeout = escape_timeout
        self._reader_loop: asyncio.AbstractEventLoop | None = None
        self._original_termios: list[Any] | None = None
        self._stdin_fd: int | None = None
        self._prev_fatal_handlers: dict[int, Any] = {}
        self._prev_sigwinch_handler: Any = None
        self._sigwinch_installed = False
        self._write_log_path = write_log

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    @property
    def capturing(self) -> bool:
        return self._input_handler is not None

    # -- input capture ------------------------------------------------------

    def start(self, on_input: Callable[[str], None]) -> None:
        """Enter raw mode and deliver complete key sequences to *on_input*."""
        if self._input_handler is not None:
            raise RuntimeError("ProcessTerminal input capture already started")
        self._input_handler = on_input

        fd = sys.stdin.fileno()
        self._stdin_fd = fd
        if os.isatty(fd):
            self._original_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
        self._install_emergency_restore()

        self._raw_write(BRACKETED_PASTE_ENABLE)

        self._stdin_buffer = StdinBuffer(timeout=self._escape_timeout)
        self._stdin_buffer.on_data(self._forward_input)
        self._stdin_buffer.on_paste(self._forward_paste)

        loop = asyncio.get_running_loop()
        loop.add_reader(fd, self._on_stdin_readable)
        self._reader_loop = loop

    def stop(self) -> None:
        """Leave raw mode and stop reading stdin. Safe to call twice."""
        if self._input_handler is None:
            return
        self._input_handler = None

        if self._stdin_buffer is not None:
            self._stdin_buffer.destroy()
            self._stdin_buffer = None

        fd = sys.stdin.fileno()
        if self._reader_loop is not None:
            try:
                self._reader_loop.remove_reader(fd)
            except (RuntimeError, ValueError) as exc:
                logger.warning("Failed to remove stdin reader: %s", exc)
            self._reader_loop = None

        self._raw_write(BRACKETED_PASTE_DISABLE)

        if self._original_termios is not None:
            try:
                termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
            except termios.error as exc:
                logger.warning("Failed to restore terminal attributes: %s", exc)
            self._original_termios = None

        self._remove_emergency_restore()
        self._stdin_fd = None

    def _forward_input(self, data: str) -> None:
        if self._input_handler is not None:
            self._input_handler(data)

    def _forward_paste(self, data: str) -> None:
        # Each pasted character arrives as its own keypress
        for ch in data:
            self._forward_input(ch)

    def _on_stdin_readable(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if not raw:
            return

        data = raw.decode("utf-8", errors="replace")
        if self._stdin_buffer is not None:
            self._stdin_buffer.process(data)

    # -- emergency restore --------------------------------------------------

    def _install_emergency_restore(self) -> None:
        """Restore the tty on interpreter exit or a fatal signal while capturing."""
        atexit.register(self._restore_tty)
        for signum in FATAL_SIGNALS:
            previous = signal.getsignal(signum)
            if previous == signal.SIG_IGN:
                continue
            try:
                signal.signal(signum, self._on_fatal_signal)
            except ValueError:
                # Not the main thread
                logger.debug("Cannot install handler for signal %d", signum)
                continue
            self._prev_fatal_handlers[signum] = previous

    def _remove_emergency_restore(self) -> None:
        atexit.unregister(self._restore_tty)
        handlers, self._prev_fatal_handlers = self._prev_fatal_handlers, {}
        for signum, previous in handlers.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)

    def _on_fatal_signal(self, signum: int, frame: object) -> None:
        logger.warning("Signal %d during input capture, restoring terminal", signum)
        self._restore_tty()
        self._remove_emergency_restore()
        # Re-deliver so the previous disposition (usually termination) applies
        signal.raise_signal(signum)

    def _restore_tty(self) -> None:
        """Leave raw mode and bracketed paste without touching the event loop."""
        self._raw_write(BRACKETED_PASTE_DISABLE + SHOW_CURSOR)
        if self._original_termios is None or self._stdin_fd is None:
            return
        try:
            termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._original_termios)
        except termios.error as exc:
            logger.warning("Failed to restore terminal attributes: %s", exc)

    # -- resize -------------------------------------------------------------

    def add_resize_listener(self, listener: Callable[[], None]) -> None:
        self._resize_listeners.append(listener)
        if not self._sigwinch_installed:
            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
            signal.signal(signal.SIGWINCH, self._on_sigwinch)
            self._sigwinch_installed = True

    def remove_resize_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._resize_listeners:
            self._resize_listeners.remove(listener)
        if not self._resize_listeners and self._sigwinch_installed:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler or signal.SIG_DFL)
            self._prev_sigwinch_handler = None
            self._sigwinch_installed = False

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        for listener in list(self._resize_listeners):
            listener()

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError as exc:
                logger.warning("Failed to append to write log %s: %s", self._write_log_path, exc)

    def hide_cursor(self) -> None:
        self._raw_write(HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(SHOW_CURSOR)

    def clear_screen(self) -> None:
        self._raw_write(CLEAR_SCREEN)

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as exc:
            logger.warning("Terminal write failed: %s", exc)
