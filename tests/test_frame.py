"""Tests for pi.frame.frame -- frame layout and single-write painting."""

from __future__ import annotations

from pi.frame.config import FrameConfig
from pi.frame.frame import (
    FRAME_OVERHEAD,
    body_lines,
    compose_frame,
    footer_lines,
    format_hints,
    frame_dimensions,
    framed,
    header_lines,
    paint,
    render_context,
)
from pi.frame.session import Session
from pi.frame.terminal import CLEAR_SCREEN, HIDE_CURSOR
from pi.frame.utils import strip_ansi, visible_width

from .virtual_terminal import VirtualTerminal


def make_session(rows: int = 24, columns: int = 80, **config: int) -> tuple[Session, VirtualTerminal]:
    terminal = VirtualTerminal(rows=rows, columns=columns)
    return Session(terminal, config=FrameConfig(**config)), terminal


class TestDimensions:
    def test_standard_terminal(self) -> None:
        session, _ = make_session()
        dims = frame_dimensions(session)
        assert dims.width == 76
        assert dims.height == 22
        assert dims.inner_width == 74
        assert render_context(session).content_height == 22 - FRAME_OVERHEAD

    def test_width_is_capped(self) -> None:
        session, _ = make_session(columns=300)
        assert frame_dimensions(session).width == 100

    def test_tiny_terminal_still_has_content_row(self) -> None:
        session, _ = make_session(rows=5, columns=3)
        ctx = render_context(session)
        assert ctx.content_height >= 1
        assert ctx.inner_width >= 2

    def test_frame_fits_the_terminal_height(self) -> None:
        session, _ = make_session()
        ctx = render_context(session)
        rows = compose_frame(
            ctx.inner_width,
            header_lines(ctx.inner_width, "Title"),
            body_lines([], ctx.inner_width, ctx.content_height),
            footer_lines(ctx.inner_width, []),
        )
        assert len(rows) == frame_dimensions(session).height


class TestRows:
    def test_every_row_has_the_frame_width(self) -> None:
        rows = compose_frame(
            20,
            header_lines(20, "A very long title that will not fit", "sub", "desc"),
            body_lines(["short", "日本語", "x" * 50], 20, 5, center=True),
            footer_lines(20, ["q Back", "? Help"]),
        )
        assert {visible_width(row) for row in rows} == {22}

    def test_borders(self) -> None:
        rows = compose_frame(4, [], [], [])
        assert strip_ansi(rows[0]) == "╭────╮"
        assert strip_ansi(rows[1]) == "╰────╯"

    def test_header_and_footer_sizes(self) -> None:
        assert len(header_lines(10, "t")) == 4
        assert len(footer_lines(10, ["q Back"])) == 4
        assert strip_ansi(header_lines(10, "t")[3]).startswith("├")

    def test_framed_centers(self) -> None:
        assert strip_ansi(framed("ab", 6, center=True)) == "│  ab  │"

    def test_format_hints_dims_the_key(self) -> None:
        hints = format_hints(["Space Play/Pause", "q Back"])
        assert strip_ansi(hints) == "Space Play/Pause  q Back"
        assert hints.startswith("\x1b[2mSpace")

    def test_body_is_vertically_centered(self) -> None:
        rows = body_lines(["a", "b"], 4, 5)
        assert [strip_ansi(r).strip("│ ") for r in rows] == ["", "a", "b", "", ""]

    def test_body_is_truncated_to_height(self) -> None:
        assert len(body_lines([str(i) for i in range(10)], 4, 3)) == 3


class TestPaint:
    def test_single_write_per_frame(self) -> None:
        session, terminal = make_session()
        paint(session, ["row1", "row2", "row3"])
        assert terminal.write_count == 1
        out = terminal.output
        assert out.startswith(CLEAR_SCREEN + HIDE_CURSOR)
        assert not out.endswith("\r\n")

    def test_top_padding_and_line_endings(self) -> None:
        session, terminal = make_session(padding_y=2)
        paint(session, ["a", "b", "c"])
        body = terminal.output[len(CLEAR_SCREEN + HIDE_CURSOR):]
        assert body.count("\r\n") == 2 + 2
        assert "\n" not in body.replace("\r\n", "")

    def test_rows_are_centered_horizontally(self) -> None:
        session, terminal = make_session(columns=40)
        paint(session, ["x" * 10])
        assert terminal.output.endswith(" " * 15 + "x" * 10)

    def test_vertical_centering(self) -> None:
        session, terminal = make_session(rows=20)
        paint(session, ["a", "b"], center_vertically=True)
        body = terminal.output[len(CLEAR_SCREEN + HIDE_CURSOR):]
        assert body.count("\r\n") == 9 + 1
