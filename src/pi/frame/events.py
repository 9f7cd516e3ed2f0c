"""Resize-aware event multiplexer.

Every interactive loop asks for "the next thing to react to": either a key
or a request to repaint (the terminal was resized). The two sources are
raced with :func:`asyncio.wait`; the loser is cancelled so no capture or
timer outlives the call.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable

from pi.frame.keyboard import KeypressWait
from pi.frame.keys import KeyEvent

if TYPE_CHECKING:
    from pi.frame.session import Session


class EventMultiplexer:
    """Produces the next key event, or ``None`` when a redraw is due."""

    def __init__(self, session: Session) -> None:
        self._session = session

    async def next_event(
        self,
        source: Callable[[], KeypressWait] | None = None,
        until: asyncio.Future[Any] | None = None,
    ) -> KeyEvent | None:
        """Wait for a key, a redraw request or *until*, whichever comes first.

        *source* creates the key wait (a one-shot capture by default).
        Returns the key if one arrived, even when a redraw became due in the
        same loop iteration; the redraw flag then stays set and the next
        call returns ``None`` right away. Returns ``None`` after consuming the
        redraw flag, or when *until* completes.
        """
        session = self._session
        if session.needs_redraw:
            session.needs_redraw = False
            return None
        if until is not None and until.done():
            return None

        wait = source() if source is not None else session.keyboard.wait_for_keypress()
        ticker = asyncio.ensure_future(self._redraw_due())
        waiters: set[asyncio.Future[Any]] = {wait.future, ticker}
        if until is not None:
            waiters.add(until)

        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            ticker.cancel()
            wait.cancel()

        if wait.future in done and not wait.future.cancelled():
            return wait.future.result()
        if ticker in done:
            session.needs_redraw = False
        return None

    async def _redraw_due(self) -> None:
        session = self._session
        while not session.needs_redraw:
            await asyncio.sleep(session.config.poll_interval)
