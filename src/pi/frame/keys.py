"""Keyboard input parsing.

Turns one complete input sequence (as produced by
:class:`~pi.frame.stdin_buffer.StdinBuffer`) into an immutable
:class:`KeyEvent`. Legacy xterm / VT220 encodings are understood, including
the ``CSI 1;<mod>`` and ``CSI <n>;<mod>~`` modifier forms, SS3 keys, control
characters and ESC-prefixed (meta) characters.

Key identifiers use the ``"ctrl+shift+alt+name"`` format, e.g. ``"ctrl+c"``,
``"shift+tab"``, ``"pageUp"`` or ``"q"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

KeyId = str


class Key:
    """Named key constants."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    clear = "clear"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# xterm modifier parameter: 1 + (shift=1 | alt=2 | ctrl=4)
_MOD_SHIFT = 1
_MOD_ALT = 2
_MOD_CTRL = 4

# Final byte of ``CSI 1;<mod> X`` / ``CSI X`` / ``SS3 X``
_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "E": "clear",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Parameter of ``CSI <n>~`` / ``CSI <n>;<mod>~``
_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    11: "f1",
    12: "f2",
    13: "f3",
    14: "f4",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

_CSI_LETTER_RE = re.compile(r"^\x1b\[(?:1;(\d+))?([ABCDEFHPQRS])$")
_CSI_TILDE_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+))?~$")
_SS3_RE = re.compile(r"^\x1bO(\d*)([ABCDEFHPQRS])$")
# modifyOtherKeys: CSI 27;<mod>;<code>~
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")

_CONTROL_KEYS: dict[str, str] = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x1b": "escape",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
}

# Ctrl combinations outside the 0x01-0x1a letter range
_CONTROL_SYMBOLS: dict[str, str] = {
    "\x00": "space",
    "\x1c": "\\",
    "\x1d": "]",
    "\x1e": "^",
    "\x1f": "_",
}

_MODIFIER_ORDER = ("ctrl", "shift", "alt")


@dataclass(frozen=True)
class KeyEvent:
    """One logical keypress.

    ``name`` is the logical key (``"up"``, ``"enter"``, ``"q"``) or ``None``
    for input that could not be identified. ``char`` is the printable
    character the key produced, if any.
    """

    name: str | None
    char: str | None = None
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    sequence: str = ""

    @property
    def key_id(self) -> KeyId | None:
        if self.name is None:
            return None
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.shift:
            prefix += "shift+"
        if self.alt:
            prefix += "alt+"
        return prefix + self.name

    @property
    def printable(self) -> bool:
        return (
            self.char is not None
            and len(self.char) >= 1
            and not self.ctrl
            and not self.alt
        )


def normalize_key_id(key_id: KeyId) -> KeyId:
    """Bring modifiers into canonical ``ctrl+shift+alt+`` order.

    ``"shift+ctrl+Up"`` and ``"ctrl+shift+up"`` normalize to the same id.
    Single characters keep their case (``"Q"`` is a distinct key) and
    multi-letter names compare case-insensitively for the common spellings
    (``"pageup"`` becomes ``"pageUp"``).
    """
    parts = key_id.split("+")
    # "ctrl++" means ctrl and the plus key
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]
    name = parts[-1]
    modifiers = {p.lower() for p in parts[:-1]}

    unknown = modifiers.difference(_MODIFIER_ORDER)
    if unknown:
        raise ValueError(f"Unknown modifier(s) in key id {key_id!r}: {sorted(unknown)}")

    if len(name) > 1:
        lowered = name.lower()
        name = {"pageup": "pageUp", "pagedown": "pageDown", "esc": "escape",
                "return": "enter"}.get(lowered, lowered)
    elif name.isalpha() and name.isupper():
        name = name.lower()
        modifiers.add("shift")

    prefix = "".join(f"{m}+" for m in _MODIFIER_ORDER if m in modifiers)
    return prefix + name


def matches_key(event: KeyEvent, key_id: KeyId) -> bool:
    """Check whether *event* is the key described by *key_id*."""
    event_id = event.key_id
    if event_id is None:
        return False
    return event_id == normalize_key_id(key_id)


def _decode_modifier(param: str | None) -> tuple[bool, bool, bool]:
    if not param:
        return False, False, False
    bits = max(int(param) - 1, 0)
    return bool(bits & _MOD_CTRL), bool(bits & _MOD_SHIFT), bool(bits & _MOD_ALT)


def _parse_single(ch: str, sequence: str) -> KeyEvent:
    if ch in _CONTROL_KEYS:
        name = _CONTROL_KEYS[ch]
        return KeyEvent(name=name, char=" " if ch == " " else None, sequence=sequence)

    if ch in _CONTROL_SYMBOLS:
        return KeyEvent(name=_CONTROL_SYMBOLS[ch], ctrl=True, sequence=sequence)

    code = ord(ch)
    if 1 <= code <= 26:
        return KeyEvent(name=chr(code + ord("a") - 1), ctrl=True, sequence=sequence)

    if not ch.isprintable():
        return KeyEvent(name=None, sequence=sequence)

    if ch.isalpha() and ch.isupper():
        return KeyEvent(name=ch.lower(), char=ch, shift=True, sequence=sequence)
    return KeyEvent(name=ch.lower() if ch.isalpha() else ch, char=ch, sequence=sequence)


def parse_key_event(data: str) -> KeyEvent:  # noqa: C901
    """Parse one complete input sequence into a :class:`KeyEvent`."""
    if not data:
        return KeyEvent(name=None, sequence=data)

    if len(data) == 1:
        return _parse_single(data, data)

    if data == "\x1b[Z":
        return KeyEvent(name="tab", shift=True, sequence=data)

    m = _CSI_LETTER_RE.match(data)
    if m:
        ctrl, shift, alt = _decode_modifier(m.group(1))
        return KeyEvent(
            name=_LETTER_KEYS[m.group(2)], ctrl=ctrl, shift=shift, alt=alt, sequence=data
        )

    m = _CSI_TILDE_RE.match(data)
    if m:
        name = _TILDE_KEYS.get(int(m.group(1)))
        if name is None:
            return KeyEvent(name=None, sequence=data)
        ctrl, shift, alt = _decode_modifier(m.group(2))
        return KeyEvent(name=name, ctrl=ctrl, shift=shift, alt=alt, sequence=data)

    m = _SS3_RE.match(data)
    if m:
        ctrl, shift, alt = _decode_modifier(m.group(1))
        return KeyEvent(
            name=_LETTER_KEYS[m.group(2)], ctrl=ctrl, shift=shift, alt=alt, sequence=data
        )

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        ctrl, shift, alt = _decode_modifier(m.group(1))
        base = _parse_single(chr(int(m.group(2))), data)
        return KeyEvent(
            name=base.name,
            char=None if ctrl or alt else base.char,
            ctrl=ctrl or base.ctrl,
            shift=shift or base.shift,
            alt=alt,
            sequence=data,
        )

    # Meta: ESC followed by a single character
    if len(data) == 2 and data[0] == "\x1b":
        base = _parse_single(data[1], data)
        if base.name is None:
            return base
        return KeyEvent(
            name=base.name,
            ctrl=base.ctrl,
            shift=base.shift,
            alt=True,
            sequence=data,
        )

    # Multi-codepoint printable text (IME input, emoji)
    if data[0] != "\x1b" and data.isprintable():
        return KeyEvent(name=data, char=data, sequence=data)

    return KeyEvent(name=None, sequence=data)


def is_printable(event: KeyEvent) -> bool:
    return event.printable


def number_key(event: KeyEvent) -> int | None:
    """Return the digit for a plain number key, else ``None``."""
    if event.printable and event.char is not None and len(event.char) == 1:
        if event.char.isdigit() and event.char.isascii():
            return int(event.char)
    return None
