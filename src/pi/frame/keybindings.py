"""Named actions and the keys bound to them."""

from __future__ import annotations

from typing import Literal

from pi.frame.keys import KeyEvent, KeyId, matches_key, normalize_key_id

FrameAction = Literal[
    # Navigation
    "up",
    "down",
    "left",
    "right",
    "pageUp",
    "pageDown",
    # Dialog flow
    "confirm",
    "back",
    "cancel",
    "help",
    # Multi-select
    "toggle",
    "selectAll",
    "selectNone",
]

KeyBindingsConfig = dict[FrameAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[FrameAction, KeyId | list[KeyId]] = {
    # Navigation
    "up": ["up", "k"],
    "down": ["down", "j"],
    "left": ["left", "h"],
    "right": ["right", "l"],
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    # Dialog flow
    "confirm": "enter",
    "back": ["backspace", "escape", "q", "ctrl+c"],
    "cancel": ["escape", "ctrl+c"],
    "help": "?",
    # Multi-select
    "toggle": "space",
    "selectAll": "a",
    "selectNone": "n",
}


class KeyBindings:
    """Resolves key events to actions.

    User config replaces the whole key list of each action it names; every
    other action keeps its default keys.
    """

    def __init__(self, config: KeyBindingsConfig | None = None) -> None:
        self._action_to_keys: dict[FrameAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeyBindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = [normalize_key_id(k) for k in key_array]

        for action, keys in config.items():
            if action not in DEFAULT_KEYBINDINGS:
                raise ValueError(f"Unknown action {action!r}")
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = [normalize_key_id(k) for k in key_array]

    def matches(self, event: KeyEvent, action: FrameAction) -> bool:
        """Check if *event* triggers *action*."""
        for key in self._action_to_keys.get(action, []):
            if matches_key(event, key):
                return True
        return False

    def get_keys(self, action: FrameAction) -> list[KeyId]:
        return list(self._action_to_keys.get(action, []))

    def set_config(self, config: KeyBindingsConfig) -> None:
        self._build_maps(config)
