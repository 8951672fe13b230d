"""Convert the CHIP-8 display buffer into RGB frames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .framebuffer import DISPLAY_HEIGHT, DISPLAY_WIDTH
from .palette import MONOCHROME, RGBColor, validate_palette


@dataclass
class RenderResult:
    """Packed RGB frame produced by :class:`Renderer`."""

    width: int
    height: int
    data: bytes

    def get_pixel(self, x: int, y: int) -> RGBColor:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        offset = (y * self.width + x) * 3
        return (self.data[offset], self.data[offset + 1], self.data[offset + 2])

    def to_surface(self):
        try:
            import pygame  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("pygame is required to build surfaces") from exc
        return pygame.image.frombuffer(self.data, (self.width, self.height), "RGB")


class Renderer:
    """Scale a 1-byte-per-pixel buffer into an RGB image."""

    def __init__(
        self,
        palette: Sequence[RGBColor] = MONOCHROME,
        *,
        width: int = DISPLAY_WIDTH,
        height: int = DISPLAY_HEIGHT,
    ) -> None:
        self._background, self._foreground = validate_palette(palette)
        self._width = width
        self._height = height

    def render(self, pixels: bytes, *, scale: int = 1) -> RenderResult:
        if scale <= 0:
            raise ValueError("scale must be positive")
        if len(pixels) < self._width * self._height:
            raise ValueError("display buffer is smaller than the configured resolution")

        off = bytes(self._background) * scale
        on = bytes(self._foreground) * scale
        out = bytearray()
        for y in range(self._height):
            start = y * self._width
            line = b"".join(on if value else off for value in pixels[start : start + self._width])
            out += line * scale
        return RenderResult(self._width * scale, self._height * scale, bytes(out))
