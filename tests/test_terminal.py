"""Tests for pi.frame.terminal -- ProcessTerminal capture and tty restore."""

from __future__ import annotations

import os
import signal
import sys
from typing import Any, Iterator

import pytest

from pi.frame import terminal as terminal_module
from pi.frame.terminal import (
    BRACKETED_PASTE_DISABLE,
    BRACKETED_PASTE_ENABLE,
    SHOW_CURSOR,
    ProcessTerminal,
)


class PipeStdin:
    """Stand-in for ``sys.stdin`` backed by the read end of a pipe."""

    def __init__(self, fd: int) -> None:
        self._fd = fd

    def fileno(self) -> int:
        return self._fd


@pytest.fixture
def fake_tty(monkeypatch: pytest.MonkeyPatch) -> Iterator[dict[str, Any]]:
    """Pretend stdin is a tty and record every termios restore."""
    read_fd, write_fd = os.pipe()
    calls: dict[str, Any] = {"tcsetattr": [], "raised": []}

    monkeypatch.setattr(sys, "stdin", PipeStdin(read_fd))
    monkeypatch.setattr(terminal_module.os, "isatty", lambda fd: True)
    monkeypatch.setattr(terminal_module.termios, "tcgetattr", lambda fd: ["saved-mode"])
    monkeypatch.setattr(terminal_module.tty, "setraw", lambda fd: None)
    monkeypatch.setattr(
        terminal_module.termios,
        "tcsetattr",
        lambda fd, when, mode: calls["tcsetattr"].append((fd, mode)),
    )
    monkeypatch.setattr(terminal_module.signal, "raise_signal", calls["raised"].append)
    calls["fd"] = read_fd
    yield calls
    os.close(read_fd)
    os.close(write_fd)


class TestCapture:
    @pytest.mark.asyncio
    async def test_start_and_stop_toggle_raw_mode(self, fake_tty, capsys) -> None:
        terminal = ProcessTerminal()
        terminal.start(lambda data: None)
        assert terminal.capturing
        terminal.stop()
        assert not terminal.capturing
        assert fake_tty["tcsetattr"] == [(fake_tty["fd"], ["saved-mode"])]
        out = capsys.readouterr().out
        assert out.index(BRACKETED_PASTE_ENABLE) < out.index(BRACKETED_PASTE_DISABLE)

    @pytest.mark.asyncio
    async def test_second_start_raises(self, fake_tty) -> None:
        terminal = ProcessTerminal()
        terminal.start(lambda data: None)
        try:
            with pytest.raises(RuntimeError):
                terminal.start(lambda data: None)
        finally:
            terminal.stop()


class TestEmergencyRestore:
    @pytest.mark.asyncio
    async def test_handlers_installed_only_while_capturing(self, fake_tty) -> None:
        before = signal.getsignal(signal.SIGTERM)
        terminal = ProcessTerminal()
        terminal.start(lambda data: None)
        assert signal.getsignal(signal.SIGTERM) == terminal._on_fatal_signal
        assert signal.getsignal(signal.SIGHUP) == terminal._on_fatal_signal
        terminal.stop()
        assert signal.getsignal(signal.SIGTERM) == before

    @pytest.mark.asyncio
    async def test_sigterm_restores_terminal_then_redelivers(self, fake_tty, capsys) -> None:
        before = signal.getsignal(signal.SIGTERM)
        terminal = ProcessTerminal()
        terminal.start(lambda data: None)
        capsys.readouterr()

        handler = signal.getsignal(signal.SIGTERM)
        handler(signal.SIGTERM, None)

        assert fake_tty["tcsetattr"] == [(fake_tty["fd"], ["saved-mode"])]
        out = capsys.readouterr().out
        assert BRACKETED_PASTE_DISABLE in out
        assert SHOW_CURSOR in out
        assert fake_tty["raised"] == [signal.SIGTERM]
        assert signal.getsignal(signal.SIGTERM) == before
        terminal.stop()

    @pytest.mark.asyncio
    async def test_ignored_signal_is_left_alone(self, fake_tty, monkeypatch) -> None:
        monkeypatch.setattr(signal, "getsignal", lambda signum: signal.SIG_IGN)
        installed: list[int] = []
        monkeypatch.setattr(signal, "signal", lambda signum, handler: installed.append(signum))
        terminal = ProcessTerminal()
        terminal.start(lambda data: None)
        terminal.stop()
        assert installed == []
