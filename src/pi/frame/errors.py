"""Exception hierarchy for the frame runtime."""

from __future__ import annotations


class FrameError(Exception):
    """Base class for all runtime errors raised by pi-frame."""


class HandlerConflict(FrameError):
    """A keyboard capture was requested while another one is active.

    Only one raw-mode capture may exist per session. Nested modals have to
    pause the outer capture before installing their own.
    """


class WindowStateError(FrameError):
    """A window was driven through an invalid lifecycle transition."""


class NoSelectableItems(FrameError):
    """Every item of a selection list is disabled."""
