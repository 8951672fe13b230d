"""Chip8App program loading and headless execution."""

from __future__ import annotations

import pytest

import run
from pychip8.loader import Variant
from pychip8.system import MachineConfig, create_machine
from pychip8.ui.app import AppConfig, Chip8App


def _words(*opcodes: int) -> bytes:
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


# LD V0, 0x0A ; LD F, V0 ; DRW V1, V1, 5 ; JP 0x206
GLYPH_PROGRAM = _words(0x600A, 0xF029, 0xD115, 0x1206)


def test_app_load_program(tmp_path) -> None:
    rom_path = tmp_path / "sample.ch8"
    rom_path.write_bytes(b"\x01\x02\x03")

    config = AppConfig(rom_path=rom_path, variant=Variant.ETI660)
    machine = create_machine(MachineConfig(variant=Variant.ETI660))
    app = Chip8App(config)

    app._load_program(machine, rom_path)

    for offset, value in enumerate(b"\x01\x02\x03"):
        assert machine.memory.load8(0x600 + offset) == value
    assert machine.program is not None
    assert machine.program.name == "sample.ch8"


def test_app_missing_program_raises(tmp_path) -> None:
    app = Chip8App(AppConfig(rom_path=tmp_path / "missing.ch8"))
    machine = create_machine()

    with pytest.raises(RuntimeError, match="not found"):
        app._load_program(machine, tmp_path / "missing.ch8")


def test_app_oversized_program_raises(tmp_path) -> None:
    rom_path = tmp_path / "huge.ch8"
    rom_path.write_bytes(bytes(0xE01))
    app = Chip8App(AppConfig(rom_path=rom_path))
    machine = create_machine()

    with pytest.raises(RuntimeError, match="Failed to load"):
        app._load_program(machine, rom_path)
    assert machine.halted


def test_run_headless_draws_glyph(tmp_path) -> None:
    rom_path = tmp_path / "glyph.ch8"
    rom_path.write_bytes(GLYPH_PROGRAM)
    app = Chip8App(AppConfig(rom_path=rom_path, enable_audio=False))

    machine = app.run_headless(2)

    rows = machine.framebuffer.rows()
    # Glyph "A" is F0 90 F0 90 90.
    assert rows[0].startswith("####")
    assert rows[1].startswith("#..#")
    assert machine.cpu.state.pc == 0x206


def test_run_headless_reports_fault(tmp_path) -> None:
    rom_path = tmp_path / "bad.ch8"
    rom_path.write_bytes(_words(0x00EE))
    app = Chip8App(AppConfig(rom_path=rom_path))

    with pytest.raises(RuntimeError, match="StackUnderflowError"):
        app.run_headless(1)


def test_cli_headless_prints_display(tmp_path, capsys) -> None:
    rom_path = tmp_path / "glyph.ch8"
    rom_path.write_bytes(GLYPH_PROGRAM)

    status = run.main(["--rom", str(rom_path), "--headless", "1", "--no-audio"])

    out = capsys.readouterr().out.splitlines()
    assert status == 0
    assert len(out) == 32
    assert out[0].startswith("####....")


def test_cli_reports_fault_exit_status(tmp_path, capsys) -> None:
    rom_path = tmp_path / "bad.ch8"
    rom_path.write_bytes(_words(0xFFFF))

    with pytest.raises(SystemExit) as excinfo:
        run.main(["--rom", str(rom_path), "--headless", "1"])

    assert excinfo.value.code == 1
    assert "IllegalOpcodeError" in capsys.readouterr().err


@pytest.mark.parametrize("spec", ["-5", "1000", "fff0 8"])
def test_debug_memory_dump_rejects_out_of_range_start(spec, capsys) -> None:
    app = Chip8App(AppConfig())
    machine = create_machine()

    app._dump_memory(machine, spec)

    assert "Address out of range" in capsys.readouterr().out


def test_debug_memory_dump_stops_at_end_of_memory(capsys) -> None:
    app = Chip8App(AppConfig())
    machine = create_machine()
    machine.memory.store8(0xFFF, 0xAB)

    app._dump_memory(machine, "ff8 64")

    assert capsys.readouterr().out.splitlines() == ["FF8: 00 00 00 00 00 00 00 AB"]
