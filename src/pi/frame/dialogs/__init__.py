"""Ready-made dialogs built on the session event loop."""

from pi.frame.dialogs.base import Cancelled, DialogResult, Selected
from pi.frame.dialogs.confirm import confirm
from pi.frame.dialogs.help import (
    HelpContent,
    HelpSection,
    KeyBinding,
    help_lines,
    merge_help_content,
    show_help,
    simple_help,
)
from pi.frame.dialogs.message import MessageKind, show_message
from pi.frame.dialogs.multiselect import multi_select
from pi.frame.dialogs.select import select_menu
from pi.frame.dialogs.spinner import (
    SPINNER_ARC,
    SPINNER_CIRCLE,
    SPINNER_DOTS,
    SPINNER_LINE,
    Spinner,
    run_with_spinner,
)
from pi.frame.dialogs.text_input import password_input, text_input

__all__ = [
    "Cancelled",
    "DialogResult",
    "Selected",
    "confirm",
    "HelpContent",
    "HelpSection",
    "KeyBinding",
    "help_lines",
    "merge_help_content",
    "show_help",
    "simple_help",
    "MessageKind",
    "show_message",
    "multi_select",
    "select_menu",
    "SPINNER_ARC",
    "SPINNER_CIRCLE",
    "SPINNER_DOTS",
    "SPINNER_LINE",
    "Spinner",
    "run_with_spinner",
    "password_input",
    "text_input",
]
