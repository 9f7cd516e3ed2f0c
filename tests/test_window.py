"""Tests for pi.frame.window -- window lifecycle, key dispatch and redraws."""

from __future__ import annotations

import asyncio
import logging

import pytest

from pi.frame.config import FrameConfig
from pi.frame.dialogs.help import KeyBinding, simple_help
from pi.frame.errors import HandlerConflict, WindowStateError
from pi.frame.frame import RenderContext
from pi.frame.keys import KeyEvent
from pi.frame.session import Session
from pi.frame.window import Window, WindowActions, WindowConfig, WindowState, create_window

from .virtual_terminal import VirtualTerminal, press, wait_until


class Recorder:
    """Content callbacks that count what the window asked of them."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self.lines = lines if lines is not None else ["hello"]
        self.renders = 0
        self.contexts: list[RenderContext] = []
        self.unmounts = 0

    def render(self, ctx: RenderContext) -> list[str]:
        self.renders += 1
        self.contexts.append(ctx)
        return self.lines

    def on_unmount(self) -> None:
        self.unmounts += 1


def make_session(terminal: VirtualTerminal) -> Session:
    return Session(terminal, config=FrameConfig(poll_interval=0.005))


def start(window: Window) -> asyncio.Future[None]:
    return asyncio.ensure_future(window.run())


class TestRun:
    @pytest.mark.asyncio
    async def test_renders_frame_and_closes_on_back(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        rec = Recorder(["hello world"])
        window = create_window(
            session,
            WindowConfig(title="Player", render=rec.render, hints=["q Back"], on_unmount=rec.on_unmount),
        )
        task = start(window)
        await wait_until(lambda: window.state is WindowState.RUNNING)
        assert "Player" in terminal.text
        assert "hello world" in terminal.text
        assert session.windows == (window,)

        await press(terminal, "q")
        await asyncio.wait_for(task, 1)
        assert window.closed
        assert rec.unmounts == 1
        assert not terminal.started
        assert terminal.cursor_visible
        assert session.windows == ()

    @pytest.mark.asyncio
    async def test_content_gets_render_context(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        window = create_window(make_session(terminal), WindowConfig(title="t", render=rec.render))
        task = start(window)
        await wait_until(lambda: rec.renders > 0)
        assert rec.contexts[0] == RenderContext(inner_width=74, inner_height=20, content_height=12)
        window.close()
        await task

    @pytest.mark.asyncio
    async def test_run_twice_raises(self) -> None:
        terminal = VirtualTerminal()
        window = create_window(make_session(terminal), WindowConfig(title="t", render=lambda ctx: []))
        task = start(window)
        await press(terminal, "\x1b")
        await task
        with pytest.raises(WindowStateError):
            await window.run()

    @pytest.mark.asyncio
    async def test_close_twice_tears_down_once(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, on_unmount=rec.on_unmount),
        )
        task = start(window)
        await wait_until(lambda: terminal.started)
        window.close()
        writes = terminal.write_count
        window.close()
        await task
        assert rec.unmounts == 1
        assert terminal.stop_count == 1
        assert terminal.write_count == writes

    @pytest.mark.asyncio
    async def test_cancelling_run_restores_terminal(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, on_unmount=rec.on_unmount),
        )
        task = start(window)
        await wait_until(lambda: terminal.started)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert window.closed
        assert rec.unmounts == 1
        assert not terminal.started


class TestKeyDispatch:
    @pytest.mark.asyncio
    async def test_handler_sees_keys_before_defaults(self) -> None:
        terminal = VirtualTerminal()
        seen: list[str | None] = []

        def on_keypress(event: KeyEvent, actions: WindowActions) -> bool:
            seen.append(event.key_id)
            return event.key_id == "q"

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=lambda ctx: [], on_keypress=on_keypress),
        )
        task = start(window)
        await press(terminal, "j", "q")
        await wait_until(lambda: len(seen) == 2)
        assert window.state is WindowState.RUNNING

        await press(terminal, "\x1b")
        await asyncio.wait_for(task, 1)
        assert seen == ["j", "q", "escape"]

    @pytest.mark.asyncio
    async def test_async_handler_can_close(self) -> None:
        terminal = VirtualTerminal()

        async def on_keypress(event: KeyEvent, actions: WindowActions) -> bool:
            await asyncio.sleep(0)
            if event.key_id == "x":
                actions.close()
                return True
            return False

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=lambda ctx: [], on_keypress=on_keypress),
        )
        task = start(window)
        await press(terminal, "x")
        await asyncio.wait_for(task, 1)
        assert window.closed

    @pytest.mark.asyncio
    async def test_handler_error_propagates_after_cleanup(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()

        def on_keypress(event: KeyEvent, actions: WindowActions) -> None:
            raise ValueError("bad key")

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, on_keypress=on_keypress, on_unmount=rec.on_unmount),
        )
        task = start(window)
        await press(terminal, "z")
        with pytest.raises(ValueError, match="bad key"):
            await asyncio.wait_for(task, 1)
        assert window.closed
        assert rec.unmounts == 1
        assert terminal.cursor_visible
        assert not terminal.started

    @pytest.mark.asyncio
    async def test_redraw_inside_handler_is_deferred(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        during: list[int] = []

        def on_keypress(event: KeyEvent, actions: WindowActions) -> bool:
            before = rec.renders
            actions.redraw()
            actions.redraw()
            during.append(rec.renders - before)
            return True

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, on_keypress=on_keypress),
        )
        task = start(window)
        await wait_until(lambda: terminal.started)
        renders = rec.renders
        await press(terminal, "r")
        await wait_until(lambda: rec.renders == renders + 1)
        assert during == [0]
        await asyncio.sleep(0.02)
        assert rec.renders == renders + 1

        window.close()
        await task

    @pytest.mark.asyncio
    async def test_redraw_outside_handler_paints_now(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        window = create_window(make_session(terminal), WindowConfig(title="t", render=rec.render))
        task = start(window)
        await wait_until(lambda: terminal.started)
        renders = rec.renders
        window.actions.redraw()
        assert rec.renders == renders + 1
        window.close()
        await task


class TestResize:
    @pytest.mark.asyncio
    async def test_resize_repaints_with_new_size(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        window = create_window(make_session(terminal), WindowConfig(title="t", render=rec.render))
        task = start(window)
        await wait_until(lambda: terminal.started)
        renders = rec.renders
        terminal.simulate_resize(rows=30, columns=60)
        await wait_until(lambda: rec.renders > renders)
        assert rec.contexts[-1].inner_width == 54
        assert rec.contexts[-1].content_height == 18
        assert terminal.started
        window.close()
        await task


class TestPauseResume:
    @pytest.mark.asyncio
    async def test_pause_and_resume_keep_one_capture(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        captures: list[int] = []

        def on_keypress(event: KeyEvent, actions: WindowActions) -> bool:
            actions.pause_keyboard()
            captures.append(session.keyboard.active_captures)
            actions.resume_keyboard()
            captures.append(session.keyboard.active_captures)
            return True

        window = create_window(session, WindowConfig(title="t", render=lambda ctx: [], on_keypress=on_keypress))
        task = start(window)
        await press(terminal, "p")
        await wait_until(lambda: len(captures) == 2)
        assert captures == [0, 1]
        assert window.state is WindowState.RUNNING
        assert terminal.start_count == 2

        await press(terminal, "\x1b")
        await wait_until(lambda: len(captures) == 4)
        window.close()
        await task
        assert session.keyboard.active_captures == 0

    @pytest.mark.asyncio
    async def test_paused_window_lets_modal_capture(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        window = create_window(session, WindowConfig(title="t", render=lambda ctx: []))
        task = start(window)
        await wait_until(lambda: terminal.started)

        with pytest.raises(HandlerConflict):
            session.keyboard.wait_for_keypress()

        window.actions.pause_keyboard()
        assert window.paused
        modal = asyncio.ensure_future(session.keyboard.next_key())
        await press(terminal, "y")
        assert (await modal).key_id == "y"

        window.actions.resume_keyboard()
        assert window.state is WindowState.RUNNING
        await press(terminal, "q")
        await asyncio.wait_for(task, 1)

    @pytest.mark.asyncio
    async def test_nested_window_needs_paused_parent(self) -> None:
        terminal = VirtualTerminal()
        session = make_session(terminal)
        outer = create_window(session, WindowConfig(title="Outer", render=lambda ctx: []))
        task = start(outer)
        await wait_until(lambda: terminal.started)

        inner = create_window(session, WindowConfig(title="Inner", render=lambda ctx: []))
        with pytest.raises(WindowStateError):
            await inner.run()

        outer.actions.pause_keyboard()
        inner = create_window(session, WindowConfig(title="Inner", render=lambda ctx: ["inner body"]))
        inner_task = start(inner)
        await press(terminal, "q")
        await asyncio.wait_for(inner_task, 1)
        assert session.windows == (outer,)

        outer.actions.resume_keyboard()
        await press(terminal, "q")
        await asyncio.wait_for(task, 1)


class TestHelp:
    @pytest.mark.asyncio
    async def test_help_key_shows_overlay_then_returns(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        help_content = simple_help("Player", [KeyBinding("Space", "Play/Pause")])
        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, help=help_content),
        )
        task = start(window)
        await press(terminal, "?")
        await wait_until(lambda: window.paused and terminal.started)
        assert "HELP" in terminal.text
        assert "Play/Pause" in terminal.text

        renders = rec.renders
        await press(terminal, "x")
        await wait_until(lambda: window.state is WindowState.RUNNING)
        assert rec.renders == renders + 1

        await press(terminal, "q")
        await asyncio.wait_for(task, 1)

    @pytest.mark.asyncio
    async def test_help_key_without_help_content_is_ignored(self) -> None:
        terminal = VirtualTerminal()
        window = create_window(make_session(terminal), WindowConfig(title="t", render=lambda ctx: []))
        task = start(window)
        await press(terminal, "?")
        await asyncio.sleep(0.02)
        assert window.state is WindowState.RUNNING
        assert "HELP" not in terminal.text
        window.close()
        await task


class TestMount:
    @pytest.mark.asyncio
    async def test_mount_error_is_logged_not_fatal(self, caplog: pytest.LogCaptureFixture) -> None:
        terminal = VirtualTerminal()

        def on_mount(actions: WindowActions) -> None:
            raise RuntimeError("mount failed")

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=lambda ctx: [], on_mount=on_mount),
        )
        with caplog.at_level(logging.ERROR, logger="pi.frame.window"):
            task = start(window)
            await wait_until(lambda: window.state is WindowState.RUNNING)
        assert "on_mount hook failed" in caplog.text
        await press(terminal, "q")
        await asyncio.wait_for(task, 1)

    @pytest.mark.asyncio
    async def test_async_mount_error_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        terminal = VirtualTerminal()

        async def on_mount(actions: WindowActions) -> None:
            raise RuntimeError("late failure")

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=lambda ctx: [], on_mount=on_mount),
        )
        with caplog.at_level(logging.ERROR, logger="pi.frame.window"):
            task = start(window)
            await wait_until(lambda: "on_mount hook failed" in caplog.text)
        assert window.state is WindowState.RUNNING
        window.close()
        await task

    @pytest.mark.asyncio
    async def test_mount_task_drives_redraws_and_is_cancelled_on_close(self) -> None:
        terminal = VirtualTerminal()
        rec = Recorder()
        ticks: list[int] = []
        cancelled = asyncio.Event()

        async def on_mount(actions: WindowActions) -> None:
            try:
                while True:
                    await asyncio.sleep(0.005)
                    ticks.append(1)
                    rec.lines = [f"tick {len(ticks)}"]
                    actions.redraw()
            except asyncio.CancelledError:
                cancelled.set()
                raise

        window = create_window(
            make_session(terminal),
            WindowConfig(title="t", render=rec.render, on_mount=on_mount),
        )
        task = start(window)
        await wait_until(lambda: len(ticks) >= 2)
        assert "tick" in terminal.text
        await press(terminal, "q")
        await asyncio.wait_for(task, 1)
        await asyncio.wait_for(cancelled.wait(), 1)
