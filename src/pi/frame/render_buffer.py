"""Frame-at-a-time output batching.

A frame is painted from many small fragments (borders, padding, content
lines, cursor codes). Emitting them one by one lets the terminal show a
half-painted frame whenever the event loop switches tasks in between, so
:class:`RenderBuffer` collects the fragments of one frame and hands them to
the terminal in a single write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Callable

logger = logging.getLogger(__name__)

# Raw mode turns off output post-processing, so "\n" alone does not return
# the carriage
LINE_END = "\r\n"


class RenderBuffer:
    """Accumulates output fragments between :meth:`begin` and :meth:`flush`.

    While idle, writes pass straight through to *sink*.
    """

    def __init__(self, sink: Callable[[str], None]) -> None:
        self._sink = sink
        self._fragments: list[str] = []
        self._collecting = False

    @property
    def collecting(self) -> bool:
        return self._collecting

    @property
    def pending(self) -> str:
        return "".join(self._fragments)

    def begin(self) -> None:
        """Start collecting a frame.

        Only one frame may be in flight: a nested call is ignored (the
        pending fragments are kept) and reported as a warning.
        """
        if self._collecting:
            logger.warning(
                "RenderBuffer.begin() called while a frame is already being collected; ignoring"
            )
            return
        self._fragments = []
        self._collecting = True

    def write(self, fragment: str) -> None:
        if self._collecting:
            self._fragments.append(fragment)
        else:
            self._sink(fragment)

    def write_line(self, fragment: str = "") -> None:
        self.write(fragment + LINE_END)

    def flush(self) -> None:
        """Emit the collected frame as one write and go idle."""
        payload = "".join(self._fragments)
        self._fragments = []
        self._collecting = False
        if payload:
            self._sink(payload)

    def cancel(self) -> None:
        """Drop the collected frame without emitting anything."""
        self._fragments = []
        self._collecting = False

    @contextmanager
    def frame(self) -> Iterator[RenderBuffer]:
        """Collect one frame; flush on success, cancel if the body raises."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.cancel()
            raise
        self.flush()
