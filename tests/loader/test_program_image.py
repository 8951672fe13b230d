"""Tests for CHIP-8 program loading."""

from __future__ import annotations

import io

import pytest

from pychip8.bus import Memory
from pychip8.loader import (
    ProgramLoadError,
    Variant,
    load_program,
    load_program_from_path,
    load_program_stream,
)


def test_standard_program_loads_at_0x200() -> None:
    memory = Memory()

    image = load_program(b"\x12\x34\x56", memory)

    assert memory.read_block(0x200, 3) == b"\x12\x34\x56"
    assert image.start == 0x200
    assert image.end == 0x202
    assert image.size == 3


def test_eti660_program_loads_at_0x600() -> None:
    memory = Memory()

    image = load_program(b"\xAA\xBB", memory, Variant.ETI660)

    assert memory.read_block(0x600, 2) == b"\xAA\xBB"
    assert memory.load8(0x200) == 0
    assert image.variant is Variant.ETI660


@pytest.mark.parametrize("variant", list(Variant))
def test_program_filling_memory_exactly_fits(variant: Variant) -> None:
    memory = Memory()
    data = bytes([0x5A]) * variant.capacity

    image = load_program(data, memory, variant)

    assert image.end == 0xFFF
    assert memory.load8(0xFFF) == 0x5A


@pytest.mark.parametrize("variant", list(Variant))
def test_oversized_program_is_rejected_before_writing(variant: Variant) -> None:
    memory = Memory()
    data = bytes([0x5A]) * (variant.capacity + 1)

    with pytest.raises(ProgramLoadError):
        load_program(data, memory, variant)

    assert memory.snapshot() == bytes(4096)


def test_empty_program_is_rejected() -> None:
    with pytest.raises(ProgramLoadError):
        load_program(b"", Memory())


def test_stream_loader_detects_oversized_images() -> None:
    memory = Memory()
    stream = io.BytesIO(bytes(Variant.ETI660.capacity + 10))

    with pytest.raises(ProgramLoadError):
        load_program_stream(stream, memory, Variant.ETI660)


def test_load_from_path_records_name(tmp_path) -> None:
    rom_path = tmp_path / "maze.ch8"
    rom_path.write_bytes(b"\x60\x01\x12\x00")
    memory = Memory()

    image = load_program_from_path(rom_path, memory)

    assert image.name == "maze.ch8"
    assert memory.read_block(0x200, 4) == b"\x60\x01\x12\x00"


@pytest.mark.parametrize(
    "name, variant",
    [("standard", Variant.STANDARD), ("ETI660", Variant.ETI660), ("eti-660", Variant.ETI660)],
)
def test_variant_from_name(name: str, variant: Variant) -> None:
    assert Variant.from_name(name) is variant


def test_variant_from_unknown_name() -> None:
    with pytest.raises(ValueError):
        Variant.from_name("schip")
