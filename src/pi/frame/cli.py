"""CLI entry point for pi-frame. Uses Click for argument parsing.

Each command opens one dialog on the controlling terminal and prints the
outcome, which makes the runtime easy to try out and to drive from shell
scripts (the exit status is 1 when the user cancels).
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from pi.frame.dialogs import (
    Cancelled,
    KeyBinding,
    Selected,
    confirm,
    multi_select,
    select_menu,
    show_message,
    simple_help,
    text_input,
)
from pi.frame.frame import RenderContext
from pi.frame.session import Session
from pi.frame.window import WindowActions, WindowConfig, create_window


def _make_session() -> Session:
    return Session()


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def _finish(result: object) -> None:
    if result is None or isinstance(result, Cancelled):
        sys.exit(1)
    if isinstance(result, Selected):
        result = result.value
    if isinstance(result, list):
        for value in result:
            click.echo(value)
    else:
        click.echo(result)


@click.group(invoke_without_command=True)
@click.option("--log-file", default=None, help="Write debug logs to this file")
@click.pass_context
def main(ctx, log_file):
    """Interactive terminal dialogs."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# Dialogs
# ---------------------------------------------------------------------------


@main.command("select")
@click.argument("options", nargs=-1, required=True)
@click.option("--title", default="Select an option")
@click.option("--multi", is_flag=True, help="Allow checking several options")
def select_command(options, title, multi):
    """Pick from OPTIONS and print the choice."""

    async def run():
        async with _make_session() as session:
            if multi:
                return await multi_select(session, title, list(options))
            return await select_menu(session, title, list(options))

    _finish(_run(run()))


@main.command("confirm")
@click.argument("question")
@click.option("--default-yes", is_flag=True, help="Highlight Yes initially")
def confirm_command(question, default_yes):
    """Ask QUESTION; exit 0 for yes and 1 for no."""

    async def run():
        async with _make_session() as session:
            return await confirm(session, question, default=default_yes)

    if not _run(run()):
        sys.exit(1)


@main.command("input")
@click.argument("prompt")
@click.option("--default", "default", default="", help="Initial text")
@click.option("--required", is_flag=True, help="Refuse an empty answer")
def input_command(prompt, default, required):
    """Read a line of text and print it."""

    def validate(value: str) -> str | None:
        return "A value is required" if required and not value.strip() else None

    async def run():
        async with _make_session() as session:
            return await text_input(session, prompt, default=default, validate=validate)

    _finish(_run(run()))


@main.command("message")
@click.argument("title")
@click.argument("lines", nargs=-1)
@click.option(
    "--kind",
    type=click.Choice(["info", "success", "warning", "error"]),
    default="info",
)
def message_command(title, lines, kind):
    """Show a message and wait for a key."""

    async def run():
        async with _make_session() as session:
            await show_message(session, title, list(lines), kind)

    _run(run())


# ---------------------------------------------------------------------------
# Window demo
# ---------------------------------------------------------------------------


@main.command("counter")
def counter_command():
    """A small window: up/down change a number, ? shows help."""
    count = 0

    def render(ctx: RenderContext) -> list[str]:
        return [f"Count: {count}", "", f"{ctx.inner_width}x{ctx.content_height} content area"]

    def on_keypress(event, actions: WindowActions) -> bool:
        nonlocal count
        bindings = session.keybindings
        if bindings.matches(event, "up"):
            count += 1
        elif bindings.matches(event, "down"):
            count -= 1
        else:
            return False
        actions.redraw()
        return True

    session = _make_session()
    window = create_window(
        session,
        WindowConfig(
            title="Counter",
            render=render,
            hints=["↑↓ Change", "? Help", "q Quit"],
            help=simple_help(
                "Counter",
                [KeyBinding("↑/k", "Increment"), KeyBinding("↓/j", "Decrement"), KeyBinding("q", "Quit")],
            ),
            center_content=True,
            on_keypress=on_keypress,
        ),
    )

    async def run():
        async with session:
            await window.run()

    _run(run())
    click.echo(count)
