"""Reassemble raw stdin chunks into complete key sequences.

A read from a raw-mode terminal can end in the middle of an escape sequence
(``ESC`` in one chunk, ``[A`` in the next). Feeding such a fragment to the key
parser would produce a spurious Escape press, so :class:`StdinBuffer` holds
incomplete sequences back until they complete or a short timeout expires.
"""

from __future__ import annotations

import asyncio
import enum
import re
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


class SequenceStatus(enum.Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    NOT_ESCAPE = "not-escape"


def sequence_status(data: str) -> SequenceStatus:
    """Classify *data* as a complete escape sequence, a prefix of one, or text."""
    if not data.startswith(ESC):
        return SequenceStatus.NOT_ESCAPE
    if len(data) == 1:
        return SequenceStatus.INCOMPLETE

    introducer = data[1]

    if introducer == "[":
        # X10 mouse: ESC [ M <b> <x> <y>
        if data.startswith(ESC + "[M"):
            return _complete_if(len(data) >= 6)
        return _csi_status(data)

    if introducer == "]":
        return _complete_if(data.endswith(ESC + "\\") or data.endswith("\x07"))

    # DCS and APC strings end with ST
    if introducer in ("P", "_"):
        return _complete_if(data.endswith(ESC + "\\"))

    # SS3: ESC O <final>
    if introducer == "O":
        return _complete_if(len(data) >= 3)

    # Meta key: ESC followed by one character
    return SequenceStatus.COMPLETE


def _complete_if(condition: bool) -> SequenceStatus:
    return SequenceStatus.COMPLETE if condition else SequenceStatus.INCOMPLETE


def _csi_status(data: str) -> SequenceStatus:
    if len(data) < 3:
        return SequenceStatus.INCOMPLETE

    payload = data[2:]
    final = payload[-1]
    if not 0x40 <= ord(final) <= 0x7E:
        return SequenceStatus.INCOMPLETE

    if payload.startswith("<"):
        # SGR mouse reports contain ';' and digits before the final M/m
        return _complete_if(bool(_SGR_MOUSE_RE.match(payload)))
    return SequenceStatus.COMPLETE


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an unfinished remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if end > len(buffer):
                return sequences, buffer[pos:]
            status = sequence_status(buffer[pos:end])
            if status is SequenceStatus.INCOMPLETE:
                end += 1
                continue
            sequences.append(buffer[pos:end])
            pos = end
            break

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and emits complete sequences.

    Complete sequences go to the ``on_data`` callback; bracketed paste
    payloads go to ``on_paste`` with the markers removed.
    """

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer = ""
        self._timeout = timeout
        self._timer: asyncio.TimerHandle | None = None
        self._paste_mode = False
        self._paste_buffer = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending(self) -> str:
        """Input held back because it may be the start of an escape sequence."""
        return self._buffer

    def on_data(self, callback: Callable[[str], None]) -> None:
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data is not None:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste is not None:
            self._on_paste(data)

    def process(self, data: str) -> None:
        """Feed a chunk of input."""
        self._cancel_timer()

        if self._paste_mode:
            self._paste_buffer += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            before = self._buffer[:start]
            self._paste_buffer = self._buffer[start + len(BRACKETED_PASTE_START):]
            self._buffer = ""
            self._paste_mode = True
            # Anything typed before the paste keeps its order
            for sequence in split_sequences(before)[0]:
                self._emit_data(sequence)
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

        if self._buffer:
            self._arm_timer()

    def _finish_paste(self) -> None:
        end = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end == -1:
            return

        content = self._paste_buffer[:end]
        rest = self._paste_buffer[end + len(BRACKETED_PASTE_END):]
        self._paste_mode = False
        self._paste_buffer = ""

        self._emit_paste(content)
        if rest:
            self.process(rest)

    def _arm_timer(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to wait on: hand the fragment over as-is
            for sequence in self.flush():
                self._emit_data(sequence)
            return
        self._timer = loop.call_later(self._timeout, self._on_timeout)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self) -> None:
        self._timer = None
        for sequence in self.flush():
            self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return and drop whatever is pending, without waiting."""
        self._cancel_timer()
        if not self._buffer:
            return []
        pending, self._buffer = self._buffer, ""
        return [pending]

    def clear(self) -> None:
        self._cancel_timer()
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def destroy(self) -> None:
        self.clear()
        self._on_data = None
        self._on_paste = None
