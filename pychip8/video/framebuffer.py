"""Monochrome 64x32 display buffer."""

from __future__ import annotations

from typing import Iterable, Sequence

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32


class FrameBuffer:
    """One byte per pixel, 0 = off and 1 = on.

    Only the CPU mutates the buffer (CLS and DRW); hosts read it through
    :meth:`snapshot`.
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("display dimensions must be positive")
        self.width = width
        self.height = height
        self._pixels = bytearray(width * height)
        self.dirty = True

    def clear(self) -> None:
        self._pixels[:] = bytes(len(self._pixels))
        self.dirty = True

    def get_pixel(self, x: int, y: int) -> int:
        return self._pixels[(y % self.height) * self.width + (x % self.width)]

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """XOR an 8-pixel-wide sprite at (x, y), wrapping at the edges.

        Returns True when any lit pixel was switched off.
        """

        collision = False
        pixels = self._pixels
        width = self.width
        height = self.height
        for row_index, bits in enumerate(rows):
            py = (y + row_index) % height
            base = py * width
            for bit in range(8):
                if not bits & (0x80 >> bit):
                    continue
                index = base + (x + bit) % width
                if pixels[index]:
                    collision = True
                pixels[index] ^= 1
        self.dirty = True
        return collision

    def snapshot(self) -> bytes:
        return bytes(self._pixels)

    def rows(self) -> Sequence[str]:
        """Render the buffer as text, ``#`` for lit pixels."""

        lines: list[str] = []
        for y in range(self.height):
            start = y * self.width
            row = self._pixels[start : start + self.width]
            lines.append("".join("#" if value else "." for value in row))
        return lines

    def lit_count(self) -> int:
        return sum(1 for value in self._pixels if value)
