"""Runtime configuration.

Values come from :class:`FrameConfig` defaults and can be overridden through
``PI_FRAME_*`` environment variables via :meth:`FrameConfig.from_env`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_ENV_PREFIX = "PI_FRAME_"


@dataclass
class FrameConfig:
    """Session-wide tuning knobs."""

    # Seconds between checks of the resize flag while a key wait is pending
    poll_interval: float = 0.1
    # Seconds a lone ESC waits for the rest of an escape sequence
    escape_timeout: float = 0.01
    # Outer margin around the frame, in columns / rows
    padding_x: int = 2
    padding_y: int = 1
    max_width: int = 100
    # Append every emitted payload to this file when set
    write_log: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FrameConfig:
        env = os.environ if environ is None else environ
        config = cls()

        poll_ms = _read_int(env, "POLL_MS")
        if poll_ms is not None and poll_ms > 0:
            config.poll_interval = poll_ms / 1000.0

        escape_ms = _read_int(env, "ESCAPE_MS")
        if escape_ms is not None and escape_ms >= 0:
            config.escape_timeout = escape_ms / 1000.0

        padding_x = _read_int(env, "PADDING_X")
        if padding_x is not None and padding_x >= 0:
            config.padding_x = padding_x

        padding_y = _read_int(env, "PADDING_Y")
        if padding_y is not None and padding_y >= 0:
            config.padding_y = padding_y

        max_width = _read_int(env, "MAX_WIDTH")
        if max_width is not None and max_width > 0:
            config.max_width = max_width

        config.write_log = env.get(_ENV_PREFIX + "WRITE_LOG", "")
        return config


def _read_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(_ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}"
        ) from None
