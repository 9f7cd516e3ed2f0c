"""Tests for pi.frame.session.Session lifecycle and window stack."""

from __future__ import annotations

import logging

import pytest

from pi.frame.config import FrameConfig
from pi.frame.errors import WindowStateError
from pi.frame.keybindings import KeyBindings
from pi.frame.session import Session, TerminalSize
from pi.frame.window import Window, WindowConfig

from .virtual_terminal import VirtualTerminal


class BrokenCursorTerminal(VirtualTerminal):
    def show_cursor(self) -> None:
        raise OSError("stdout closed")


def make_session(terminal: VirtualTerminal | None = None) -> Session:
    return Session(terminal or VirtualTerminal(), config=FrameConfig(poll_interval=0.005))


class TestConstruction:
    def test_explicit_config_and_bindings(self) -> None:
        config = FrameConfig(max_width=60)
        bindings = KeyBindings({"up": "w"})
        session = Session(VirtualTerminal(), config=config, keybindings=bindings)
        assert session.config is config
        assert session.keybindings is bindings

    def test_config_defaults_to_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PI_FRAME_PADDING_X", "5")
        assert Session(VirtualTerminal()).config.padding_x == 5

    def test_size(self) -> None:
        session = make_session(VirtualTerminal(rows=30, columns=120))
        assert session.size == TerminalSize(columns=120, rows=30)


class TestLifecycle:
    def test_open_installs_one_resize_listener(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        session.open()
        session.open()
        assert session.is_open
        assert terminal.resize_listener_count == 1

    def test_resize_marks_redraw(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        session.open()
        terminal.simulate_resize(rows=40)
        assert session.needs_redraw

    def test_close_restores_terminal(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        session.open()
        session.keyboard.on_keypress(lambda e: None)
        terminal.hide_cursor()
        session.close()
        assert not session.is_open
        assert session.is_closing
        assert not terminal.started
        assert terminal.cursor_visible
        assert terminal.resize_listener_count == 0

    def test_close_without_open_does_nothing(self) -> None:
        terminal = VirtualTerminal()
        make_session(terminal).close()
        assert terminal.write_count == 0

    def test_close_drops_half_built_frame(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        session.open()
        session.buffer.begin()
        session.buffer.write("partial")
        session.close()
        assert not session.buffer.collecting
        assert "partial" not in terminal.output

    def test_close_continues_past_failures(self, caplog: pytest.LogCaptureFixture) -> None:
        terminal = BrokenCursorTerminal()
        session = make_session(terminal)
        session.open()
        session.keyboard.on_keypress(lambda e: None)
        with caplog.at_level(logging.WARNING, logger="pi.frame.session"):
            session.close()
        assert "Failed to restore cursor" in caplog.text
        assert not session.is_open
        assert not terminal.started

    @pytest.mark.asyncio
    async def test_async_context_manager(self) -> None:
        terminal = VirtualTerminal()
        async with make_session(terminal) as session:
            assert session.is_open
            assert terminal.resize_listener_count == 1
        assert not session.is_open
        assert terminal.resize_listener_count == 0


class TestWindowStack:
    @pytest.mark.asyncio
    async def test_push_requires_paused_windows(self) -> None:
        session = make_session()
        config = WindowConfig(title="Outer", render=lambda ctx: [])
        outer = Window(session, config)
        session.push_window(outer)
        with pytest.raises(WindowStateError, match="Outer"):
            session.push_window(Window(session, WindowConfig(title="Inner", render=lambda ctx: [])))
        assert session.windows == (outer,)

    def test_pop_unknown_window_is_ignored(self) -> None:
        session = make_session()
        session.pop_window(Window(session, WindowConfig(title="x", render=lambda ctx: [])))
        assert session.windows == ()
