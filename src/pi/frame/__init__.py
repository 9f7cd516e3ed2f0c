"""pi-frame: full-screen frame runtime for interactive terminal dialogs."""

# Configuration
from pi.frame.config import FrameConfig

# Errors
from pi.frame.errors import (
    FrameError,
    HandlerConflict,
    NoSelectableItems,
    WindowStateError,
)

# Event multiplexing
from pi.frame.events import EventMultiplexer

# Frame layout
from pi.frame.frame import (
    FrameDimensions,
    RenderContext,
    compose_frame,
    footer_lines,
    format_hints,
    frame_dimensions,
    header_lines,
    paint,
    render_context,
)

# Keybindings
from pi.frame.keybindings import (
    DEFAULT_KEYBINDINGS,
    FrameAction,
    KeyBindings,
)

# Keyboard input
from pi.frame.keyboard import KeyboardInput, KeyboardSubscription, KeypressWait
from pi.frame.keys import (
    Key,
    KeyEvent,
    KeyId,
    is_printable,
    matches_key,
    number_key,
    parse_key_event,
)

# Output batching
from pi.frame.render_buffer import RenderBuffer

# Selection
from pi.frame.selection import (
    ScrollState,
    SelectableItem,
    SelectionModel,
    Viewport,
    compute_viewport,
    has_enabled,
    initial_focus,
    move_next,
    move_previous,
    scroll_lines,
)

# Session
from pi.frame.session import Session, TerminalSize

# Stdin buffering
from pi.frame.stdin_buffer import StdinBuffer

# Styling
from pi.frame.style import Cell, Plain, Styled, render_cell, style

# Terminal
from pi.frame.terminal import ProcessTerminal, Terminal

# Utilities
from pi.frame.utils import truncate_to_width, visible_width

# Window
from pi.frame.window import (
    Window,
    WindowActions,
    WindowConfig,
    WindowState,
    create_window,
)

__all__ = [
    # Configuration
    "FrameConfig",
    # Errors
    "FrameError",
    "HandlerConflict",
    "NoSelectableItems",
    "WindowStateError",
    # Event multiplexing
    "EventMultiplexer",
    # Frame layout
    "FrameDimensions",
    "RenderContext",
    "compose_frame",
    "footer_lines",
    "format_hints",
    "frame_dimensions",
    "header_lines",
    "paint",
    "render_context",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "FrameAction",
    "KeyBindings",
    # Keyboard input
    "KeyboardInput",
    "KeyboardSubscription",
    "KeypressWait",
    "Key",
    "KeyEvent",
    "KeyId",
    "is_printable",
    "matches_key",
    "number_key",
    "parse_key_event",
    # Output batching
    "RenderBuffer",
    # Selection
    "ScrollState",
    "SelectableItem",
    "SelectionModel",
    "Viewport",
    "compute_viewport",
    "has_enabled",
    "initial_focus",
    "move_next",
    "move_previous",
    "scroll_lines",
    # Session
    "Session",
    "TerminalSize",
    # Stdin buffering
    "StdinBuffer",
    # Styling
    "Cell",
    "Plain",
    "Styled",
    "render_cell",
    "style",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Utilities
    "truncate_to_width",
    "visible_width",
    # Window
    "Window",
    "WindowActions",
    "WindowConfig",
    "WindowState",
    "create_window",
]
