"""Video helpers for the CHIP-8 emulator."""

from __future__ import annotations

from .font import FONT_DATA, FONT_START, GLYPH_BYTES, GLYPH_COUNT, glyph_address
from .framebuffer import DISPLAY_HEIGHT, DISPLAY_WIDTH, FrameBuffer
from .palette import AMBER, MONOCHROME, PALETTES, PHOSPHOR, palette_by_name, validate_palette
from .renderer import RenderResult, Renderer

__all__ = [
    "FONT_DATA",
    "FONT_START",
    "GLYPH_BYTES",
    "GLYPH_COUNT",
    "glyph_address",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    "FrameBuffer",
    "Renderer",
    "RenderResult",
    "MONOCHROME",
    "PHOSPHOR",
    "AMBER",
    "PALETTES",
    "palette_by_name",
    "validate_palette",
]
