"""Python CHIP-8 emulator.

The package hosts the virtual CPU together with its memory, display, keypad,
timer, audio and UI layers used by ``run.py``.
"""

from __future__ import annotations

from . import utils, bus, video, io, cpu, loader, system, audio, ui

__all__: list[str] = [
    "cpu",
    "bus",
    "video",
    "audio",
    "io",
    "loader",
    "system",
    "ui",
    "utils",
]
