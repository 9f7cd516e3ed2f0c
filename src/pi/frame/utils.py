"""Terminal text measurement: ANSI-aware widths, truncation and alignment.

Content lines handed to the runtime may embed SGR styling. Everything here
measures the *visible* columns of such lines so frames can be padded and
clipped without breaking escape sequences or wide characters.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI sequences: ESC[ <params> <final byte>
_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
# OSC 8 hyperlinks: ESC]8;;<uri> BEL
_OSC8_RE = re.compile(r"\x1b\]8;;[^\x07]*\x07")

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"  # CSI
    r"|\x1b\]8;;[^\x07]*\x07"  # OSC 8
)

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _grapheme_width(g: str) -> int:
    """Return the display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tone modifiers, regional indicators
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def strip_ansi(text: str) -> str:
    """Remove escape sequences from *text*."""
    return _STRIP_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Escape sequences are ignored and tabs count as 3 columns. Pure ASCII
    takes a fast path; other strings are measured per grapheme cluster and
    cached.
    """
    if not text:
        return 0

    stripped = strip_ansi(text)
    if not stripped:
        return 0
    stripped = stripped.replace("\t", "   ")

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def _match_escape(text: str, pos: int) -> str | None:
    if text[pos] != "\x1b":
        return None
    for pattern in (_CSI_RE, _OSC8_RE):
        m = pattern.match(text, pos)
        if m:
            return m.group(0)
    return None


def _take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* fitting in *max_cols* columns.

    Escape sequences are kept; the cut happens on grapheme boundaries.
    """
    out: list[str] = []
    cols = 0
    pos = 0
    length = len(text)

    while pos < length:
        code = _match_escape(text, pos)
        if code is not None:
            out.append(code)
            pos += len(code)
            continue

        # Grow the cluster up to the next escape sequence
        end = text.find("\x1b", pos + 1)
        if end == -1:
            end = length
        cluster = next(grapheme.graphemes(text[pos:end]))
        w = _grapheme_width(cluster)
        if cols + w > max_cols:
            break
        out.append(cluster)
        cols += w
        pos += len(cluster)

    return "".join(out)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    The ellipsis counts towards the width. With *pad*, the result is
    right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)

    result = _take_columns(text, target_width) + ellipsis
    if pad:
        result += " " * max(0, max_width - visible_width(result))
    return result


def pad_to_width(text: str, width: int) -> str:
    """Clip or right-pad *text* so it occupies exactly *width* columns."""
    return truncate_to_width(text, width, ellipsis="", pad=True)


def center_to_width(text: str, width: int) -> str:
    """Center *text* in *width* columns, clipping when it does not fit."""
    text_width = visible_width(text)
    if text_width >= width:
        return pad_to_width(text, width)
    left = (width - text_width) // 2
    return " " * left + text + " " * (width - text_width - left)
