"""Unit tests for the CHIP-8 video renderer."""

from __future__ import annotations

import pytest

from pychip8.video import AMBER, MONOCHROME, PHOSPHOR, FrameBuffer, Renderer, palette_by_name, validate_palette


def test_render_single_pixel() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(0, 0, [0b10000000])

    result = Renderer().render(fb.snapshot())

    assert result.width == 64
    assert result.height == 32
    assert result.get_pixel(0, 0) == (255, 255, 255)
    assert result.get_pixel(1, 0) == (0, 0, 0)


def test_render_scale_factor() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(1, 0, [0b10000000])

    result = Renderer().render(fb.snapshot(), scale=10)

    assert result.width == 640
    assert result.height == 320
    assert result.get_pixel(9, 9) == (0, 0, 0)
    assert result.get_pixel(10, 0) == (255, 255, 255)
    assert result.get_pixel(19, 9) == (255, 255, 255)
    assert result.get_pixel(20, 0) == (0, 0, 0)
    assert result.get_pixel(10, 10) == (0, 0, 0)


def test_render_uses_palette() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(0, 0, [0b10000000])

    result = Renderer(PHOSPHOR).render(fb.snapshot())

    assert result.get_pixel(0, 0) == (0x00, 0xF0, 0x00)


def test_render_rejects_bad_scale() -> None:
    with pytest.raises(ValueError):
        Renderer().render(bytes(64 * 32), scale=0)


def test_get_pixel_bounds() -> None:
    result = Renderer().render(bytes(64 * 32))
    with pytest.raises(IndexError):
        result.get_pixel(64, 0)


def test_validate_palette_requires_two_rgb_colours() -> None:
    with pytest.raises(ValueError):
        validate_palette([(0, 0, 0)])
    with pytest.raises(ValueError):
        validate_palette([(0, 0), (1, 1, 1)])
    assert validate_palette([(0, 0, 256), (1, 2, 3)]) == ((0, 0, 0), (1, 2, 3))


@pytest.mark.parametrize("name, palette", [("phosphor", PHOSPHOR), (" Amber ", AMBER), ("MONOCHROME", MONOCHROME)])
def test_palette_by_name(name, palette) -> None:
    assert palette_by_name(name) == palette


def test_palette_by_name_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="amber, monochrome, phosphor"):
        palette_by_name("sepia")
