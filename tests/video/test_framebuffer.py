"""Tests for the CHIP-8 display buffer."""

from __future__ import annotations

from pychip8.video import DISPLAY_HEIGHT, DISPLAY_WIDTH, FrameBuffer
from pychip8.video.font import FONT_DATA, GLYPH_BYTES, GLYPH_COUNT, get_glyph, glyph_address


def test_buffer_starts_blank() -> None:
    fb = FrameBuffer()

    assert (fb.width, fb.height) == (DISPLAY_WIDTH, DISPLAY_HEIGHT) == (64, 32)
    assert fb.snapshot() == bytes(64 * 32)


def test_draw_sets_pixels_msb_first() -> None:
    fb = FrameBuffer()

    collision = fb.draw_sprite(0, 0, [0b10100000])

    assert not collision
    assert [fb.get_pixel(x, 0) for x in range(4)] == [1, 0, 1, 0]


def test_overlapping_draw_reports_collision() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(0, 0, [0b11000000])

    collision = fb.draw_sprite(1, 0, [0b10000000])

    assert collision
    assert fb.get_pixel(0, 0) == 1
    assert fb.get_pixel(1, 0) == 0


def test_draw_without_overlap_reports_no_collision() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(0, 0, [0xF0])

    assert not fb.draw_sprite(4, 0, [0xF0])


def test_snapshot_is_a_copy() -> None:
    fb = FrameBuffer()
    snapshot = fb.snapshot()
    fb.draw_sprite(0, 0, [0x80])

    assert snapshot[0] == 0
    assert fb.snapshot()[0] == 1


def test_rows_render_text() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(62, 0, [0xC0])

    rows = fb.rows()

    assert len(rows) == 32
    assert rows[0].endswith("##")
    assert rows[1] == "." * 64


def test_clear_marks_dirty() -> None:
    fb = FrameBuffer()
    fb.draw_sprite(0, 0, [0xFF])
    fb.dirty = False

    fb.clear()

    assert fb.dirty
    assert fb.lit_count() == 0


def test_font_glyph_draws_digit_shape() -> None:
    buffer = FrameBuffer()

    buffer.draw_sprite(0, 0, get_glyph(0x0))

    assert buffer.rows()[0].startswith("####")
    assert buffer.rows()[2].startswith("#..#")
    assert buffer.rows()[4].startswith("####")
    assert get_glyph(0x1F) == get_glyph(0xF)


def test_font_table_covers_every_hex_digit() -> None:
    assert len(FONT_DATA) == GLYPH_COUNT * GLYPH_BYTES
    assert glyph_address(0xA) == 0xA * GLYPH_BYTES
    assert glyph_address(0x1A) == glyph_address(0xA)
