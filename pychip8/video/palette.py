"""Two-colour palettes for the CHIP-8 display.

A CHIP-8 pixel is either off or on, so a palette is an ``(off, on)`` pair.
"""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

RGBColor = Tuple[int, int, int]
Palette = Tuple[RGBColor, RGBColor]


MONOCHROME: Palette = ((0, 0, 0), (0xFF, 0xFF, 0xFF))
PHOSPHOR: Palette = ((0, 0, 0), (0x00, 0xF0, 0x00))
AMBER: Palette = ((0x10, 0x08, 0x00), (0xFF, 0xB0, 0x00))

PALETTES: Mapping[str, Palette] = {
    "monochrome": MONOCHROME,
    "phosphor": PHOSPHOR,
    "amber": AMBER,
}


def validate_palette(palette: Sequence[RGBColor]) -> Palette:
    """Return ``palette`` as an ``(off, on)`` pair of 8-bit RGB tuples."""

    if len(palette) != 2:
        raise ValueError("palette needs an off colour and an on colour")
    off, on = palette
    if len(off) != 3 or len(on) != 3:
        raise ValueError("palette entries must be RGB tuples")
    return (
        (int(off[0]) & 0xFF, int(off[1]) & 0xFF, int(off[2]) & 0xFF),
        (int(on[0]) & 0xFF, int(on[1]) & 0xFF, int(on[2]) & 0xFF),
    )


def palette_by_name(name: str) -> Palette:
    try:
        return PALETTES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown palette {name!r}; choose from {', '.join(sorted(PALETTES))}") from None
